from __future__ import annotations

import textwrap

import pytest

from taskimport.config import ConfigError, load_config
from taskimport.models import ImportContext

CONFIG = textwrap.dedent(
    """\
    repository: tasks
    logging:
      json_enabled: true
      level: DEBUG
    github:
      - repo: acme/widgets
        templates:
          summary: "[{{ number }}] {{ title }}"
          priority: P1
          tags: [gh, "{% if milestone %}{{ milestone }}{% endif %}"]
      - repo: acme/gadgets
    """
)


def _write(tmp_path, text):
    path = tmp_path / 'dstask-import.yaml'
    path.write_text(text)
    return path


def test_load_config_reads_sources_and_logging(tmp_path):
    cfg = load_config(_write(tmp_path, CONFIG))
    assert cfg.repository == tmp_path / 'tasks'
    assert cfg.logging_json_enabled is True
    assert cfg.logging_level == 'DEBUG'
    assert [s.context for s in cfg.sources] == [
        ImportContext('acme', 'widgets'),
        ImportContext('acme', 'gadgets'),
    ]
    widgets = cfg.source_for('acme/widgets')
    assert widgets is not None
    assert len(widgets.templates.tags) == 2
    assert widgets.templates.summary.render(number=3, title='T') == '[3] T'
    assert cfg.source_for('acme/unknown') is None


def test_missing_templates_fall_back_to_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, CONFIG))
    gadgets = cfg.source_for('acme/gadgets')
    assert gadgets is not None
    assert gadgets.templates.priority.render() == 'P2'
    assert gadgets.templates.project.render(repo_name='gadgets') == 'gadgets'
    assert gadgets.templates.tags == []


def test_repository_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv('DSTASK_GIT_REPO', str(tmp_path / 'from-env'))
    cfg = load_config(_write(tmp_path, 'github: []\n'))
    assert cfg.repository == tmp_path / 'from-env'


def test_repository_dollar_reference(tmp_path, monkeypatch):
    monkeypatch.setenv('MY_TASKS', str(tmp_path / 'mine'))
    cfg = load_config(_write(tmp_path, 'repository: $MY_TASKS\n'))
    assert cfg.repository == tmp_path / 'mine'


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / 'absent.yaml')


@pytest.mark.parametrize(
    'text',
    [
        '- a\n- b\n',
        'github: {repo: acme/widgets}\n',
        'github:\n  - repo: not-a-slug\n',
        'github:\n  - repo: acme/widgets\n    templates:\n      summary: "{{ title "\n',
        'github:\n  - repo: acme/widgets\n    templates:\n      tags: gh\n',
        'repository: [unclosed\n',
        'github:\n  - repo: acme/widgets\n    templates: oops\n',
        'logging: oops\n',
        'github:\n  - repo: acme/widgets\n    templates:\n      summary: null\n',
        'github:\n  - repo: acme/widgets\n    templates:\n      notes: {a: b}\n',
        'github:\n  - repo: acme/widgets\n    templates:\n      tags: [gh, null]\n',
    ],
)
def test_invalid_config_raises(tmp_path, text):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, text))
