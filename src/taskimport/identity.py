"""Stable task identifiers for imported issues.

The identifier is an MD5 digest over the delimited key
``"GH" NUL owner NUL name NUL number`` rendered as a UUID string. It matches
identifiers written by earlier dstask importers, so re-importing into an
existing repository merges instead of duplicating. Only the repository
coordinates and the issue number participate: editing a title or body never
changes the identifier.
"""

from __future__ import annotations

import hashlib
import uuid

SOURCE_TAG = 'GH'
SEPARATOR = '\x00'

_SEP = SEPARATOR.encode('ascii')
# 0xFF never appears in UTF-8, so an escaped NUL cannot be confused with a field boundary.
_ESCAPED_SEP = _SEP + b'\xff'


def _field(value: str) -> bytes:
    return value.encode('utf-8').replace(_SEP, _ESCAPED_SEP)


def identity_key(repo_owner: str, repo_name: str, number: int) -> bytes:
    return _SEP.join(
        [
            SOURCE_TAG.encode('ascii'),
            _field(repo_owner),
            _field(repo_name),
            str(int(number)).encode('ascii'),
        ]
    )


def derive_uuid(repo_owner: str, repo_name: str, number: int) -> str:
    key = identity_key(repo_owner, repo_name, number)
    digest = hashlib.md5(key, usedforsecurity=False).digest()  # nosec B324 - identifier only
    return str(uuid.UUID(bytes=digest))


__all__ = ['SEPARATOR', 'SOURCE_TAG', 'derive_uuid', 'identity_key']
