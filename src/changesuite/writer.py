"""Writes a release changeset into the configured changelog file(s).

``prepend_changelog_file`` is the single entry point used by release
pipelines. It resolves targets, then hands each one to the marker inserter.

Policies:
    * No ``changelog_filename`` configured: return immediately, no I/O.
    * A target whose changeset subset is empty, or whose entries all carry
      blank changelog text, is skipped; it is neither read nor created.
    * The first failing target aborts the run and its error propagates.
      Targets after it (or still pending, when running concurrently) are not
      written.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from .config import ChangelogConfig
from .inserter import insert_changelog, render_entries
from .logging import get_logger
from .models import Changeset, TargetDescriptor, TargetResult, Workspace
from .project import Project
from .resolver import resolve_targets


def _coerce_workspaces(
    project: Project, workspaces: Iterable[Workspace | str]
) -> list[Workspace]:
    resolved: list[Workspace] = []
    for item in workspaces:
        resolved.append(item if isinstance(item, Workspace) else project.get_workspace_by_ident(item))
    return resolved


def _process_target(target: TargetDescriptor, dry_run: bool) -> TargetResult:
    logger = get_logger()
    packages = list(target.changeset)
    if not packages or not render_entries(target.changeset):
        logger.log_target_action("skip", str(target.path), packages, dry_run=dry_run)
        return TargetResult(path=target.path, packages=packages, skipped=True, dry_run=dry_run)
    outcome = insert_changelog(target.path, target.changeset, dry_run=dry_run)
    action = "create" if outcome.created else ("update" if outcome.written else "preview")
    logger.log_target_action(action, str(target.path), packages, dry_run=dry_run)
    return TargetResult(
        path=target.path,
        packages=packages,
        written=outcome.written,
        created=outcome.created,
        dry_run=dry_run,
    )


def _run_concurrently(
    targets: list[TargetDescriptor], dry_run: bool, max_workers: int
) -> list[TargetResult]:
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures: list[Future[TargetResult]] = [
            executor.submit(_process_target, target, dry_run) for target in targets
        ]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        errors = [
            exc for future in futures if future in done and (exc := future.exception()) is not None
        ]
        if errors:
            for future in pending:
                future.cancel()
            raise errors[0]
    return [future.result() for future in futures]


def prepend_changelog_file(
    config: ChangelogConfig,
    project: Project,
    changeset: Changeset,
    workspaces: Iterable[Workspace | str],
) -> list[TargetResult]:
    logger = get_logger()
    if not config.changelog_filename:
        logger.debug("changelog filename not configured; skipping changelog write")
        return []

    targets = resolve_targets(
        config.changelog_filename,
        changeset,
        _coerce_workspaces(project, workspaces),
        config.root,
    )
    with logger.timed_operation(
        "changelog_write", targets=len(targets), dry_run=config.dry_run
    ):
        if config.concurrency_enabled and len(targets) > 1:
            return _run_concurrently(targets, config.dry_run, config.concurrency_max_workers)
        return [_process_target(target, config.dry_run) for target in targets]


__all__ = ["prepend_changelog_file"]
