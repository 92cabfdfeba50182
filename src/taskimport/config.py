from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import ConfigError
from .models import ImportContext
from .templates import (
    DEFAULT_NOTES,
    DEFAULT_PRIORITY,
    DEFAULT_PROJECT,
    DEFAULT_SUMMARY,
    Templates,
)

CONFIG_DEFAULT = 'dstask-import.yaml'
REPOSITORY_ENV = 'DSTASK_GIT_REPO'
DEFAULT_REPOSITORY = '~/.dstask'


@dataclass
class SourceConfig:
    context: ImportContext
    templates: Templates


@dataclass
class ImportConfig:
    source_file: Path
    repository: Path
    sources: list[SourceConfig] = field(default_factory=list)
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = 'INFO'

    def source_for(self, slug: str) -> SourceConfig | None:
        for source in self.sources:
            if source.context.slug == slug:
                return source
        return None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)  # Fallback to original if not found
    return value


def _slot(tpl: dict[str, Any], index: int, name: str, default: str) -> str:
    if name not in tpl:
        return default
    value = tpl[name]
    if value is None or isinstance(value, (dict, list)):
        raise ConfigError(f'github[{index}].templates.{name} must be a template string')
    return str(value)


def _load_source(index: int, raw_any: Any) -> SourceConfig:
    if not isinstance(raw_any, dict):
        raise ConfigError(f'github[{index}] must be a mapping')
    raw = cast(dict[str, Any], raw_any)
    try:
        context = ImportContext.parse(str(raw.get('repo') or ''))
    except ValueError as exc:
        raise ConfigError(f'github[{index}]: {exc}') from exc
    tpl_any = raw.get('templates') or {}
    if not isinstance(tpl_any, dict):
        raise ConfigError(f'github[{index}].templates must be a mapping')
    tpl = cast(dict[str, Any], tpl_any)
    tags_any = tpl.get('tags', []) or []
    if not isinstance(tags_any, list):
        raise ConfigError(f'github[{index}].templates.tags must be a list')
    if any(t is None for t in tags_any):
        raise ConfigError(f'github[{index}].templates.tags must not contain null entries')
    templates = Templates.compile(
        summary=_slot(tpl, index, 'summary', DEFAULT_SUMMARY),
        project=_slot(tpl, index, 'project', DEFAULT_PROJECT),
        priority=_slot(tpl, index, 'priority', DEFAULT_PRIORITY),
        notes=_slot(tpl, index, 'notes', DEFAULT_NOTES),
        tags=[str(t) for t in tags_any],
    )
    return SourceConfig(context=context, templates=templates)


def load_config(path: str | Path) -> ImportConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        raw_any: Any = yaml.safe_load(p.read_text(encoding='utf-8')) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(raw_any, dict):
        raise ConfigError(f'{p} must contain a mapping')
    raw = cast(dict[str, Any], raw_any)
    logging_any = raw.get('logging') or {}
    if not isinstance(logging_any, dict):
        raise ConfigError('logging must be a mapping')
    logging_config = cast(dict[str, Any], logging_any)
    sources_any = raw.get('github', []) or []
    if not isinstance(sources_any, list):
        raise ConfigError('github must be a list of repository entries')

    repository = _resolve_env_var(raw.get('repository'))
    if not repository:
        repository = os.getenv(REPOSITORY_ENV) or DEFAULT_REPOSITORY
    repo_path = Path(str(repository)).expanduser()
    if not repo_path.is_absolute():
        repo_path = p.parent / repo_path

    return ImportConfig(
        source_file=p,
        repository=repo_path,
        sources=[_load_source(i, s) for i, s in enumerate(sources_any)],
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
    )


__all__ = ['CONFIG_DEFAULT', 'ConfigError', 'ImportConfig', 'SourceConfig', 'load_config']
