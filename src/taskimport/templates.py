from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import jinja2

from .errors import ConfigError, TemplateExpansionError

DEFAULT_SUMMARY = '{{ title }}'
DEFAULT_PROJECT = '{{ repo_name }}'
DEFAULT_PRIORITY = 'P2'
DEFAULT_NOTES = '{{ url }}'

_ENV = jinja2.Environment(  # nosec B701 - output is plain text, never HTML
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


def compile_template(source: str, slot: str) -> jinja2.Template:
    try:
        return _ENV.from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise ConfigError(f'Invalid {slot} template: {exc}') from exc


@dataclass
class Templates:
    """Compiled field-mapping templates for one source repository."""

    summary: jinja2.Template
    project: jinja2.Template
    priority: jinja2.Template
    notes: jinja2.Template
    tags: list[jinja2.Template] = field(default_factory=list)

    @classmethod
    def compile(
        cls,
        summary: str = DEFAULT_SUMMARY,
        project: str = DEFAULT_PROJECT,
        priority: str = DEFAULT_PRIORITY,
        notes: str = DEFAULT_NOTES,
        tags: Sequence[str] = (),
    ) -> Templates:
        return cls(
            summary=compile_template(summary, 'summary'),
            project=compile_template(project, 'project'),
            priority=compile_template(priority, 'priority'),
            notes=compile_template(notes, 'notes'),
            tags=[compile_template(t, f'tags[{i}]') for i, t in enumerate(tags)],
        )


def expand(template: jinja2.Template, view: Mapping[str, Any], slot: str) -> str:
    """Render ``template`` against a flat field mapping.

    Each call renders into a fresh string; nothing is shared between expansions.
    """
    try:
        return template.render(view)
    except Exception as exc:  # filters and expressions can raise anything
        raise TemplateExpansionError(slot, str(view.get('uuid', '')), exc) from exc


__all__ = [
    'DEFAULT_NOTES',
    'DEFAULT_PRIORITY',
    'DEFAULT_PROJECT',
    'DEFAULT_SUMMARY',
    'Templates',
    'compile_template',
    'expand',
]
