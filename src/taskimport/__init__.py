"""taskimport - idempotent GitHub issue import for dstask repositories.

High-level public API (stable):

from taskimport import ImportContext, Issue, Templates, TaskStore, import_issue

store = TaskStore('~/.dstask')
templates = Templates.compile(summary='{{ title }}', tags=['gh'])
task = import_issue(store, ImportContext('acme', 'widgets'), Issue.from_payload(payload), templates)

Re-running the import for the same issue updates the same task: the task
uuid is derived from owner/name/number, and local notes plus an
active/paused status survive the merge.
"""

from __future__ import annotations

from .config import ImportConfig, load_config
from .errors import (
    ConfigError,
    TaskDecodeError,
    TaskDeleteError,
    TaskImportError,
    TemplateExpansionError,
)
from .identity import derive_uuid
from .importer import ImportSummary, import_issue, import_issues, import_task
from .models import ALL_STATUSES, ImportContext, Issue, Task
from .projection import IssueView, build_task, issue_to_task
from .store import TaskStore
from .templates import Templates

__version__ = "0.1.0"

__all__ = [
    "ALL_STATUSES",
    "ConfigError",
    "ImportConfig",
    "ImportContext",
    "ImportSummary",
    "Issue",
    "IssueView",
    "Task",
    "TaskDecodeError",
    "TaskDeleteError",
    "TaskImportError",
    "TaskStore",
    "Templates",
    "TemplateExpansionError",
    "build_task",
    "derive_uuid",
    "import_issue",
    "import_issues",
    "import_task",
    "issue_to_task",
    "load_config",
    "__version__",
]
