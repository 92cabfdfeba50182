"""taskimport CLI.

Subcommands:
  import -> merge fetched GitHub issues (JSON) into the dstask repository
  uuid   -> print the task identifier derived for owner/name#number

Fetching issues is left to other tools (``gh issue list --json ...``,
``gh api``); this CLI only consumes their JSON output.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from .config import CONFIG_DEFAULT, ImportConfig, load_config
from .errors import ConfigError, classify_error
from .identity import derive_uuid
from .importer import ImportSummary, import_issues
from .logging import configure_logging
from .models import ImportContext, Issue
from .store import TaskStore
from .templates import Templates

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="taskimport", description="Import GitHub issues into a dstask repository"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational logging (env: TASKIMPORT_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    imp = sub.add_parser("import", help="Merge issue JSON into the task repository")
    imp.add_argument("--config", default=CONFIG_DEFAULT)
    imp.add_argument(
        "--input",
        required=True,
        help='Issue JSON: {"owner/name": [issue, ...]} or a list (requires --repo)',
    )
    imp.add_argument("--repo", help="Only import this repository (owner/name)")
    imp.add_argument("--json", action="store_true", help="Print the import summary as JSON")

    uid = sub.add_parser("uuid", help="Print the task uuid for an issue")
    uid.add_argument("repo", help="owner/name")
    uid.add_argument("number", type=int)
    return p


def _load_input(path: Path, repo: str | None) -> dict[str, list[dict[str, Any]]]:
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read issue input {path}: {exc}") from exc
    if isinstance(raw, list):
        if not repo:
            raise ConfigError("--repo is required when the input is a bare issue list")
        return {repo: raw}
    if not isinstance(raw, dict):
        raise ConfigError(f"Issue input {path} must be a JSON object or list")
    grouped = {str(k): v for k, v in raw.items() if isinstance(v, list)}
    if repo:
        return {repo: grouped.get(repo, [])}
    return grouped


def _templates_for(cfg: ImportConfig, slug: str) -> Templates:
    source = cfg.source_for(slug)
    return source.templates if source else Templates.compile()


def _run_import(cfg: ImportConfig, args: argparse.Namespace) -> int:
    grouped = _load_input(Path(args.input), args.repo)
    store = TaskStore(cfg.repository)
    summaries: list[ImportSummary] = []
    for slug, payloads in grouped.items():
        try:
            context = ImportContext.parse(slug)
            issues = [Issue.from_payload(p) for p in payloads]
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid issue input for {slug}: {exc}") from exc
        summaries.append(import_issues(store, context, issues, _templates_for(cfg, slug)))

    if args.json:
        print(json.dumps([s.to_dict() for s in summaries], indent=2))
    else:
        for s in summaries:
            print(f"[import] {s.repo}: imported={len(s.imported)} failed={len(s.failed)}")
            for failure in s.failed:
                print(f"  #{failure['number']} ({failure['category']}): {failure['error']}")
    return 0 if all(s.ok for s in summaries) else 2


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.quiet and os.environ.get("TASKIMPORT_QUIET") == "1":
        args.quiet = True

    if args.cmd == "uuid":
        try:
            context = ImportContext.parse(args.repo)
        except ValueError as exc:
            print(f"[uuid] {exc}", file=sys.stderr)
            return 1
        print(derive_uuid(context.repo_owner, context.repo_name, args.number))
        return 0

    try:
        cfg = load_config(args.config)
        log = configure_logging(
            json_logging=cfg.logging_json_enabled,
            level="ERROR" if args.quiet else cfg.logging_level,
            # under --json stdout carries only the summary document
            stream=sys.stderr if args.json else sys.stdout,
        )
        with log.timed_operation("cli_import", config=str(cfg.source_file)):
            return _run_import(cfg, args)
    except ConfigError as exc:
        info = classify_error(exc)
        print(f"[{args.cmd}] {info.category} error: {info.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
