"""Error taxonomy & redaction for issue imports.

Every fatal per-issue failure is a :class:`TaskImportError` subclass that
names the identifier or file involved. Store write failures are left as the
underlying ``OSError``.

Public API:
- TemplateExpansionError / TaskDecodeError / TaskDeleteError
- classify_error(exc) -> ErrorInfo
- redact(text) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"gh[ousr]_[A-Za-z0-9]{20,}"),  # OAuth / app tokens
]

_REDACTION_PLACEHOLDER = "<redacted>"


class ConfigError(RuntimeError):
    pass


class TaskImportError(RuntimeError):
    """Fatal failure while importing a single issue."""


class TemplateExpansionError(TaskImportError):
    def __init__(self, slot: str, uuid: str, cause: BaseException) -> None:
        super().__init__(f"template {slot!r} failed for task {uuid}: {cause}")
        self.slot = slot
        self.uuid = uuid


class TaskDecodeError(TaskImportError):
    def __init__(self, path: Path, cause: BaseException | str) -> None:
        super().__init__(f"failed to decode {str(path)!r}: {cause}")
        self.path = path


class TaskDeleteError(TaskImportError):
    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(f"failed to remove stale task {str(path)!r}: {cause}")
        self.path = path


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace token-looking substrings (issue bodies sometimes carry them)."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Map an exception raised by an import onto a reporting category.

    - TemplateExpansionError -> 'template'
    - TaskDecodeError -> 'decode'
    - TaskDeleteError -> 'delete'
    - ConfigError -> 'config'
    - OSError (store writes) -> 'io'
    - Fallback -> 'generic'
    """
    msg = redact(str(exc))
    name = exc.__class__.__name__
    if isinstance(exc, TemplateExpansionError):
        return ErrorInfo("template", msg, name, {"slot": exc.slot, "uuid": exc.uuid})
    if isinstance(exc, TaskDecodeError):
        return ErrorInfo("decode", msg, name, {"path": str(exc.path)})
    if isinstance(exc, TaskDeleteError):
        return ErrorInfo("delete", msg, name, {"path": str(exc.path)})
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name)
    if isinstance(exc, OSError):
        filename = getattr(exc, "filename", None)
        return ErrorInfo("io", msg, name, {"path": str(filename)} if filename else None)
    return ErrorInfo("generic", msg, name)


__all__ = [
    "ConfigError",
    "ErrorInfo",
    "TaskDecodeError",
    "TaskDeleteError",
    "TaskImportError",
    "TemplateExpansionError",
    "classify_error",
    "redact",
]
