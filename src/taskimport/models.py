from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

STATUS_ACTIVE = 'active'
STATUS_PENDING = 'pending'
STATUS_DELEGATED = 'delegated'
STATUS_DEFERRED = 'deferred'
STATUS_PAUSED = 'paused'
STATUS_RECURRING = 'recurring'
STATUS_RESOLVED = 'resolved'
STATUS_TEMPLATE = 'template'

# Every status has its own directory in the task repository; scans walk them in this order.
ALL_STATUSES: tuple[str, ...] = (
    STATUS_ACTIVE,
    STATUS_PENDING,
    STATUS_DELEGATED,
    STATUS_DEFERRED,
    STATUS_PAUSED,
    STATUS_RECURRING,
    STATUS_RESOLVED,
    STATUS_TEMPLATE,
)


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce an ISO-8601 string or datetime into an aware datetime.

    ``None``, empty strings and the Go zero time (year 1) map to ``None``.
    Naive values are assumed to be UTC.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if dt.year <= 1:
        return None
    return dt


def _nested(payload: Mapping[str, Any], key: str, *names: str) -> str:
    value = payload.get(key)
    if isinstance(value, Mapping):
        for name in names:
            inner = value.get(name)
            if isinstance(inner, str) and inner:
                return inner
        return ''
    return value if isinstance(value, str) else ''


@dataclass(frozen=True)
class Issue:
    """An issue as fetched from GitHub, with nested author/milestone flattened."""

    number: int
    title: str
    body: str = ''
    author: str = ''
    state: str = 'open'
    url: str = ''
    milestone: str = ''
    created_at: datetime | None = None
    closed: bool = False
    closed_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Issue:
        """Build from a REST (``user``/``html_url``) or GraphQL (``author``/``url``) payload."""
        number_any = payload.get('number')
        if isinstance(number_any, bool) or not isinstance(number_any, int):
            raise ValueError(f'issue payload has no integer number: {number_any!r}')
        state = str(payload.get('state') or 'open')
        closed_any = payload.get('closed')
        closed = bool(closed_any) if closed_any is not None else state.lower() == 'closed'
        author = _nested(payload, 'author', 'login', 'name') or _nested(payload, 'user', 'login', 'name')
        return cls(
            number=number_any,
            title=str(payload.get('title') or ''),
            body=str(payload.get('body') or ''),
            author=author,
            state=state,
            url=str(payload.get('html_url') or payload.get('url') or ''),
            milestone=_nested(payload, 'milestone', 'title'),
            created_at=parse_timestamp(payload.get('created_at', payload.get('createdAt'))),
            closed=closed,
            closed_at=parse_timestamp(payload.get('closed_at', payload.get('closedAt'))),
        )


@dataclass(frozen=True)
class ImportContext:
    repo_owner: str
    repo_name: str

    @classmethod
    def parse(cls, slug: str) -> ImportContext:
        owner, sep, name = slug.strip().partition('/')
        if not sep or not owner or not name or '/' in name:
            raise ValueError(f'Expected owner/name repository slug, got {slug!r}')
        return cls(owner, name)

    @property
    def slug(self) -> str:
        return f'{self.repo_owner}/{self.repo_name}'


@dataclass
class Task:
    """Local task record as stored in the dstask repository."""

    uuid: str
    status: str = STATUS_PENDING
    summary: str = ''
    project: str = ''
    priority: str = ''
    notes: str = ''
    tags: list[str] = field(default_factory=list)
    created: datetime | None = None
    resolved: datetime | None = None


__all__ = [
    'ALL_STATUSES',
    'STATUS_ACTIVE',
    'STATUS_DEFERRED',
    'STATUS_DELEGATED',
    'STATUS_PAUSED',
    'STATUS_PENDING',
    'STATUS_RECURRING',
    'STATUS_RESOLVED',
    'STATUS_TEMPLATE',
    'ImportContext',
    'Issue',
    'Task',
    'parse_timestamp',
]
