from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Literal token substituted with a workspace's absolute root directory.
PACKAGE_DIR_TOKEN = "<packageDir>"


@dataclass(frozen=True)
class ChangesetEntry:
    """Resolved version plus generated changelog text for one package."""

    version: str
    changelog: str


# package identifier -> entry; insertion order is the rendering order
Changeset = dict[str, ChangesetEntry]


@dataclass(frozen=True)
class Workspace:
    """Handle on a package inside the monorepo.

    Only the identifier and the on-disk root are ever consulted by the
    writer; richer workspace metadata stays with the project loader.
    """

    ident: str
    cwd: Path


@dataclass(frozen=True)
class GlobalTemplate:
    path: str


@dataclass(frozen=True)
class PerWorkspaceTemplate:
    template: str

    def expand(self, workspace: Workspace) -> str:
        return self.template.replace(PACKAGE_DIR_TOKEN, str(workspace.cwd.absolute()))


FilenameTemplate = GlobalTemplate | PerWorkspaceTemplate


@dataclass
class TargetDescriptor:
    path: Path
    changeset: Changeset = field(default_factory=dict)


@dataclass
class TargetResult:
    path: Path
    packages: list[str]
    written: bool = False
    created: bool = False
    skipped: bool = False
    dry_run: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "path": str(self.path),
            "packages": list(self.packages),
            "written": self.written,
            "created": self.created,
            "skipped": self.skipped,
            "dry_run": self.dry_run,
        }


__all__ = [
    "PACKAGE_DIR_TOKEN",
    "ChangesetEntry",
    "Changeset",
    "Workspace",
    "GlobalTemplate",
    "PerWorkspaceTemplate",
    "FilenameTemplate",
    "TargetDescriptor",
    "TargetResult",
]
