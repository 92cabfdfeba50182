from __future__ import annotations

import json
import textwrap

from taskimport.cli import main
from taskimport.identity import derive_uuid
from taskimport.store import TaskStore

CONFIG = textwrap.dedent(
    """\
    repository: tasks
    logging:
      level: WARNING
    github:
      - repo: acme/widgets
        templates:
          notes: "{{ url }}"
          tags: [gh]
    """
)

ISSUES = {
    'acme/widgets': [
        {
            'number': 42,
            'title': 'Fix bug',
            'state': 'open',
            'user': {'login': 'octocat'},
            'html_url': 'https://github.com/acme/widgets/issues/42',
            'created_at': '2024-01-01T00:00:00Z',
        },
        {
            'number': 43,
            'title': 'Done already',
            'state': 'closed',
            'closed_at': '2024-01-03T00:00:00Z',
            'created_at': '2024-01-02T00:00:00Z',
        },
    ]
}


def _setup(tmp_path, issues=ISSUES):
    cfg = tmp_path / 'dstask-import.yaml'
    cfg.write_text(CONFIG)
    data = tmp_path / 'issues.json'
    data.write_text(json.dumps(issues))
    return cfg, data


def test_import_command_writes_tasks(tmp_path, capsys):
    cfg, data = _setup(tmp_path)
    rc = main(['import', '--config', str(cfg), '--input', str(data)])
    assert rc == 0
    out = capsys.readouterr().out
    assert '[import] acme/widgets: imported=2 failed=0' in out

    store = TaskStore(tmp_path / 'tasks')
    assert store.find(derive_uuid('acme', 'widgets', 42))[0].parent.name == 'pending'
    assert store.find(derive_uuid('acme', 'widgets', 43))[0].parent.name == 'resolved'


def test_import_command_json_summary(tmp_path, capsys):
    cfg, data = _setup(tmp_path)
    rc = main(['import', '--config', str(cfg), '--input', str(data), '--json'])
    assert rc == 0
    out = capsys.readouterr().out
    payload = json.loads(out)
    assert payload[0]['repo'] == 'acme/widgets'
    assert payload[0]['totals'] == {'imported': 2, 'failed': 0}


def test_bare_list_requires_repo(tmp_path, capsys):
    cfg, data = _setup(tmp_path, issues=ISSUES['acme/widgets'])
    assert main(['import', '--config', str(cfg), '--input', str(data)]) == 1
    assert '--repo is required' in capsys.readouterr().err
    assert main(['import', '--config', str(cfg), '--input', str(data), '--repo', 'acme/widgets']) == 0


def test_failed_issue_sets_exit_code(tmp_path, capsys):
    cfg, data = _setup(tmp_path)
    broken = tmp_path / 'tasks' / 'active' / f'{derive_uuid("acme", "widgets", 42)}.yml'
    broken.parent.mkdir(parents=True)
    broken.write_text('summary: [broken\n')
    rc = main(['import', '--config', str(cfg), '--input', str(data)])
    assert rc == 2
    out = capsys.readouterr().out
    assert 'failed=1' in out
    assert '#42 (decode)' in out


def test_missing_config_is_reported(tmp_path, capsys):
    rc = main(['import', '--config', str(tmp_path / 'nope.yaml'), '--input', 'x.json'])
    assert rc == 1
    assert 'config error' in capsys.readouterr().err


def test_uuid_command(capsys):
    assert main(['uuid', 'acme/widgets', '42']) == 0
    assert capsys.readouterr().out.strip() == derive_uuid('acme', 'widgets', 42)


def test_uuid_command_rejects_bad_slug(capsys):
    assert main(['uuid', 'widgets', '42']) == 1


def test_json_summary_is_the_only_stdout_at_info_level(tmp_path, capsys):
    cfg = tmp_path / 'dstask-import.yaml'
    cfg.write_text('repository: tasks\ngithub: []\n')
    data = tmp_path / 'issues.json'
    data.write_text(json.dumps(ISSUES))

    rc = main(['import', '--config', str(cfg), '--input', str(data), '--json'])

    assert rc == 0
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload[0]['totals'] == {'imported': 2, 'failed': 0}
    assert 'Operation: cli_import_start' in captured.err
    assert 'task created' in captured.err


def test_malformed_config_section_is_reported(tmp_path, capsys):
    cfg = tmp_path / 'dstask-import.yaml'
    cfg.write_text('logging: oops\n')
    rc = main(['import', '--config', str(cfg), '--input', str(tmp_path / 'issues.json')])
    assert rc == 1
    assert 'logging must be a mapping' in capsys.readouterr().err
