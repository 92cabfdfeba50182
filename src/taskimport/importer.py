"""Merge-on-import of candidate tasks into the task repository.

A re-imported issue may already exist locally under any status, edited by
the user since the last import. ``import_task`` finds that copy by its
derived identifier, removes it, and writes the merged task back. Upstream
wins for every field except two:

* non-empty local notes replace the candidate's notes
* a ``pending`` candidate keeps a local ``active``/``paused`` status

There is no index and no lock: the status directories are scanned on every
import, so imports against one repository must be serialized by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from .errors import TaskDeleteError, TaskImportError, classify_error
from .logging import get_logger
from .models import (
    ALL_STATUSES,
    STATUS_ACTIVE,
    STATUS_PAUSED,
    STATUS_PENDING,
    ImportContext,
    Issue,
    Task,
)
from .projection import issue_to_task
from .store import TaskStore
from .templates import Templates

logger = logging.getLogger(__name__)

_IN_PROGRESS = (STATUS_ACTIVE, STATUS_PAUSED)


def _take_existing(store: TaskStore, uuid: str) -> Task | None:
    """Remove and return the first stored copy of ``uuid``, if any."""
    for status in ALL_STATUSES:
        path = store.path_for(status, uuid)
        # Unreadable files are treated exactly like missing ones.
        try:
            data = store.read_bytes(path)
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning('treating unreadable task file %s as absent: %s', path, exc)
            continue

        existing = store.decode(data, status, uuid, path)
        try:
            store.delete(path)
        except OSError as exc:
            raise TaskDeleteError(path, exc) from exc
        logger.debug('removed stale copy of %s from %s', uuid, status)
        return existing
    return None


def merge_tasks(candidate: Task, existing: Task) -> Task:
    merged = replace(candidate, tags=list(candidate.tags))
    if existing.notes:
        merged.notes = existing.notes
    if merged.status == STATUS_PENDING and existing.status in _IN_PROGRESS:
        merged.status = existing.status
    return merged


def import_task(store: TaskStore, task: Task) -> Task:
    """Place ``task`` into ``store``, merging with any existing copy.

    Raises TaskDecodeError when an existing copy cannot be parsed and
    TaskDeleteError when it cannot be removed; write errors from the store
    propagate unchanged. Returns the task as written.
    """
    existing = _take_existing(store, task.uuid)
    if existing is not None:
        task = merge_tasks(task, existing)
    store.save(task)
    get_logger().log_task_action(
        'merged' if existing is not None else 'created', task.uuid, status=task.status
    )
    return task


def import_issue(
    store: TaskStore, context: ImportContext, issue: Issue, templates: Templates
) -> Task:
    return import_task(store, issue_to_task(context, issue, templates))


@dataclass
class ImportSummary:
    repo: str
    imported: list[dict[str, Any]] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            'repo': self.repo,
            'totals': {'imported': len(self.imported), 'failed': len(self.failed)},
            'imported': self.imported,
            'failed': self.failed,
            'ok': self.ok,
        }


def import_issues(
    store: TaskStore,
    context: ImportContext,
    issues: Iterable[Issue],
    templates: Templates,
) -> ImportSummary:
    """Import issues one after another; a failing issue does not stop the batch."""
    summary = ImportSummary(repo=context.slug)
    log = get_logger()
    with log.timed_operation('import_issues', repo=context.slug):
        for issue in issues:
            try:
                task = import_issue(store, context, issue, templates)
            except (TaskImportError, OSError) as exc:
                info = classify_error(exc)
                log.log_error(
                    f'import of {context.slug}#{issue.number} failed',
                    error=info.message,
                    category=info.category,
                    issue_number=issue.number,
                )
                summary.failed.append(
                    {'number': issue.number, 'category': info.category, 'error': info.message}
                )
                continue
            summary.imported.append(
                {'number': issue.number, 'uuid': task.uuid, 'status': task.status}
            )
    return summary


__all__ = ['ImportSummary', 'import_issue', 'import_issues', 'import_task', 'merge_tasks']
