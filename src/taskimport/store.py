"""Status-partitioned flat-file task repository (dstask layout).

``<root>/<status>/<uuid>.yml`` holds one task. The file body carries the
editable fields only; the identifier and status are implied by the file name
and the directory, so moving a file between directories changes its status.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import TaskDecodeError
from .models import ALL_STATUSES, Task, parse_timestamp

TASK_SUFFIX = '.yml'

logger = logging.getLogger(__name__)


def _coerce_str(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ''
    if isinstance(value, (dict, list)):
        raise ValueError(f'{key} must be a scalar, got {type(value).__name__}')
    return str(value)


def _coerce_tags(raw: dict[str, Any]) -> list[str]:
    value = raw.get('tags')
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f'tags must be a list, got {type(value).__name__}')
    return [str(t) for t in value]


def encode_task(task: Task) -> str:
    payload = {
        'summary': task.summary,
        'notes': task.notes,
        'tags': list(task.tags),
        'project': task.project,
        'priority': task.priority,
        'created': task.created,
        'resolved': task.resolved,
    }
    return cast(str, yaml.safe_dump(payload, sort_keys=False, allow_unicode=True))


class TaskStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    def path_for(self, status: str, uuid: str) -> Path:
        if status not in ALL_STATUSES:
            raise ValueError(f'Unknown task status {status!r}')
        return self.root / status / f'{uuid}{TASK_SUFFIX}'

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def delete(self, path: Path) -> None:
        path.unlink()

    def decode(self, data: bytes, status: str, uuid: str, path: Path) -> Task:
        try:
            raw_any: Any = yaml.safe_load(data.decode('utf-8'))
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise TaskDecodeError(path, exc) from exc
        if raw_any is None:
            raw_any = {}
        if not isinstance(raw_any, dict):
            raise TaskDecodeError(path, 'task document must be a mapping')
        raw = cast(dict[str, Any], raw_any)
        try:
            return Task(
                uuid=uuid,
                status=status,
                summary=_coerce_str(raw, 'summary'),
                project=_coerce_str(raw, 'project'),
                priority=_coerce_str(raw, 'priority'),
                notes=_coerce_str(raw, 'notes'),
                tags=_coerce_tags(raw),
                created=parse_timestamp(raw.get('created')),
                resolved=parse_timestamp(raw.get('resolved')),
            )
        except (TypeError, ValueError) as exc:
            raise TaskDecodeError(path, exc) from exc

    def save(self, task: Task) -> Path:
        """Write ``task`` into the directory of its current status.

        The document is written to a sibling temp file and renamed over the
        target so readers never observe a half-written task.
        """
        path = self.path_for(task.status, task.uuid)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + '.tmp')
        try:
            tmp.write_text(encode_task(task), encoding='utf-8')
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug('wrote task %s to %s', task.uuid, path)
        return path

    def find(self, uuid: str) -> list[Path]:
        """All on-disk copies of ``uuid`` across every status directory."""
        return [p for p in (self.path_for(s, uuid) for s in ALL_STATUSES) if p.is_file()]


__all__ = ['TASK_SUFFIX', 'TaskStore', 'encode_task']
