"""ChangeSuite CLI.

Subcommands:
  write     -> insert changeset entries below the marker of each target file
  validate  -> read + marker check every target without writing (dry run)
  targets   -> list resolved target files and the packages they receive

Exit codes: 0 success, 1 changelog failure, 2 usage / configuration error.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .changeset import load_changeset
from .config import CONFIG_DEFAULT, ChangelogConfig, ConfigError
from .errors import ChangelogError, classify_error
from .models import Changeset, TargetResult, Workspace
from .project import Project
from .resolver import resolve_targets
from .runtime import execute_command, prepare_config
from .ux import print_error, print_success, print_target
from .writer import prepend_changelog_file

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=CONFIG_DEFAULT)
    parser.add_argument(
        "--changeset",
        required=True,
        type=Path,
        help="JSON file mapping package identifiers to {version, changelog}",
    )
    parser.add_argument(
        "--workspace",
        dest="workspaces",
        action="append",
        default=[],
        help="Workspace identifier to write (repeatable; default: packages in the changeset)",
    )
    parser.add_argument(
        "--all-workspaces",
        action="store_true",
        help="Consider every discovered workspace, not just those in the changeset",
    )
    parser.add_argument(
        "--changelog-filename",
        help="Override changelog.filename (use <packageDir> for per-package files)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="changesuite", description="Write release changelogs into monorepo changelog files"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational logging (env: CHANGESUITE_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pw = sub.add_parser("write", help="Insert changeset entries into changelog files")
    _add_selection_args(pw)
    pw.add_argument("--dry-run", action="store_true", help="Validate targets without writing")
    pw.add_argument("--summary-json", type=Path, help="Write per-target results as JSON")

    pv = sub.add_parser("validate", help="Check every target is readable and has the marker")
    _add_selection_args(pv)

    pt = sub.add_parser("targets", help="List resolved changelog targets")
    _add_selection_args(pt)

    return p


def _quiet(args: argparse.Namespace) -> bool:
    return bool(args.quiet or os.environ.get("CHANGESUITE_QUIET"))


def _select_workspaces(
    project: Project, changeset: Changeset, args: argparse.Namespace
) -> list[Workspace]:
    if args.workspaces:
        return [project.get_workspace_by_ident(ident) for ident in args.workspaces]
    if args.all_workspaces:
        return project.workspaces
    return [project.get_workspace_by_ident(ident) for ident in changeset if ident in project]


def _report(results: list[TargetResult], args: argparse.Namespace, verb: str) -> None:
    if _quiet(args):
        return
    for result in results:
        if result.skipped:
            status = "skipped"
        elif result.created:
            status = "created"
        elif result.written:
            status = "updated"
        else:
            status = "ok"
        print_target(status, str(result.path), result.packages)
    print_success(f"{verb} {len(results)} changelog target(s)")


def _cmd_write(cfg: ChangelogConfig, args: argparse.Namespace) -> int:
    changeset = load_changeset(args.changeset)
    project = Project.from_config(cfg)
    results = prepend_changelog_file(
        cfg, project, changeset, _select_workspaces(project, changeset, args)
    )
    _report(results, args, "Previewed" if cfg.dry_run else "Processed")
    summary_path: Path | None = getattr(args, "summary_json", None)
    if summary_path is not None:
        payload = {
            "dry_run": cfg.dry_run,
            "targets": [result.to_dict() for result in results],
        }
        summary_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return 0


def _cmd_targets(cfg: ChangelogConfig, args: argparse.Namespace) -> int:
    changeset = load_changeset(args.changeset)
    project = Project.from_config(cfg)
    targets = resolve_targets(
        cfg.changelog_filename,
        changeset,
        _select_workspaces(project, changeset, args),
        cfg.root,
    )
    if not targets:
        print("No changelog targets (changelog.filename not configured or no workspaces)")
    for target in targets:
        print(f"{target.path}\t{','.join(target.changeset) or '-'}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.cmd == "validate":
        args.dry_run = True
    try:
        cfg = prepare_config(args)
    except ConfigError as exc:
        print_error(classify_error(exc).message)
        return 2

    handlers = {
        "write": lambda: _cmd_write(cfg, args),
        "validate": lambda: _cmd_write(cfg, args),
        "targets": lambda: _cmd_targets(cfg, args),
    }
    try:
        return execute_command(handlers[args.cmd], args.cmd, dry_run=cfg.dry_run)
    except (ChangelogError, OSError) as exc:
        info = classify_error(exc)
        print_error(f"[{info.category}] {info.message}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
