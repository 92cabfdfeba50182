"""Flat issue view and issue -> task projection.

Templates address every field by name (``{{ title }}``, ``{{ repo_owner }}``)
so the view is deliberately flat: nested author/milestone objects are
reduced to their display strings before any template sees them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from .identity import derive_uuid
from .models import STATUS_PENDING, STATUS_RESOLVED, ImportContext, Issue, Task
from .templates import Templates, expand


@dataclass(frozen=True)
class IssueView:
    uuid: str
    repo_owner: str
    repo_name: str
    author: str
    body: str
    closed: bool
    closed_at: datetime | None
    created_at: datetime | None
    milestone: str
    number: int
    state: str
    title: str
    url: str

    @classmethod
    def build(cls, context: ImportContext, issue: Issue) -> IssueView:
        return cls(
            uuid=derive_uuid(context.repo_owner, context.repo_name, issue.number),
            repo_owner=context.repo_owner,
            repo_name=context.repo_name,
            author=issue.author,
            body=issue.body,
            closed=issue.closed,
            closed_at=issue.closed_at,
            created_at=issue.created_at,
            milestone=issue.milestone,
            number=issue.number,
            state=issue.state,
            title=issue.title,
            url=issue.url,
        )

    def as_mapping(self) -> dict[str, Any]:
        return asdict(self)


def build_task(view: IssueView, templates: Templates) -> Task:
    """Populate a candidate task from the view.

    Raises TemplateExpansionError on the first failing template; no partial
    task escapes. Tag templates that render to ``''`` produce no tag.
    """
    task = Task(uuid=view.uuid, status=STATUS_PENDING, created=view.created_at)
    if view.closed:
        task.status = STATUS_RESOLVED
        task.resolved = view.closed_at

    task.summary = expand(templates.summary, view.as_mapping(), 'summary')
    task.project = expand(templates.project, view.as_mapping(), 'project')
    task.priority = expand(templates.priority, view.as_mapping(), 'priority')
    task.notes = expand(templates.notes, view.as_mapping(), 'notes')

    for i, tag_template in enumerate(templates.tags):
        tag = expand(tag_template, view.as_mapping(), f'tags[{i}]')
        if tag != '':
            task.tags.append(tag)
    return task


def issue_to_task(context: ImportContext, issue: Issue, templates: Templates) -> Task:
    return build_task(IssueView.build(context, issue), templates)


__all__ = ['IssueView', 'build_task', 'issue_to_task']
