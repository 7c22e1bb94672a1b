"""Changelog target resolution.

Turns the configured filename into the concrete files that receive text and
decides which part of the changeset each file gets. Nothing here touches the
filesystem; paths are computed, never checked.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .models import (
    PACKAGE_DIR_TOKEN,
    Changeset,
    FilenameTemplate,
    GlobalTemplate,
    PerWorkspaceTemplate,
    TargetDescriptor,
    Workspace,
)


def parse_template(filename: str | None) -> FilenameTemplate | None:
    """Classify a configured changelog filename.

    Returns ``None`` when changelog writing is disabled.
    """
    if not filename:
        return None
    if PACKAGE_DIR_TOKEN in filename:
        return PerWorkspaceTemplate(filename)
    return GlobalTemplate(filename)


def _absolute(path: str, root: Path) -> Path:
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = root / candidate
    return candidate


def resolve_targets(
    filename: str | None,
    changeset: Changeset,
    workspaces: Iterable[Workspace],
    root: Path,
) -> list[TargetDescriptor]:
    template = parse_template(filename)
    if template is None:
        return []

    if isinstance(template, GlobalTemplate):
        return [TargetDescriptor(path=_absolute(template.path, root), changeset=dict(changeset))]

    # Several workspaces may expand to the same file; keep one descriptor per path.
    by_path: dict[Path, TargetDescriptor] = {}
    for workspace in workspaces:
        path = _absolute(template.expand(workspace), root)
        descriptor = by_path.setdefault(path, TargetDescriptor(path=path))
        entry = changeset.get(workspace.ident)
        if entry is not None:
            descriptor.changeset[workspace.ident] = entry
    return list(by_path.values())


__all__ = ["parse_template", "resolve_targets"]
