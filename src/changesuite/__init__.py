"""ChangeSuite - changelog writer for monorepo release tooling.

High-level public API (stable):

from changesuite import load_config, Project, prepend_changelog_file, load_changeset

cfg = load_config('changesuite.config.yaml')
project = Project.from_config(cfg)
changeset = load_changeset('changeset.json')
results = prepend_changelog_file(cfg, project, changeset, changeset.keys())

``results`` holds one TargetResult per changelog file that was considered.
The CLI (``changesuite write``) is a thin layer over the same calls.
"""

from __future__ import annotations

from .changeset import build_changeset, load_changeset
from .config import ChangelogConfig, ConfigError, load_config
from .errors import (
    ChangelogError,
    ChangesetError,
    MissingMarkerError,
    UnreadableFileError,
    WorkspaceNotFoundError,
)
from .inserter import MARKER, insert_changelog
from .models import ChangesetEntry, TargetDescriptor, TargetResult, Workspace
from .project import Project
from .resolver import resolve_targets
from .writer import prepend_changelog_file

# Version constant (sync manually with pyproject)
__version__ = "0.1.0"

__all__ = [
    "MARKER",
    "ChangelogConfig",
    "ChangelogError",
    "ChangesetEntry",
    "ChangesetError",
    "ConfigError",
    "MissingMarkerError",
    "Project",
    "TargetDescriptor",
    "TargetResult",
    "UnreadableFileError",
    "Workspace",
    "WorkspaceNotFoundError",
    "build_changeset",
    "insert_changelog",
    "load_changeset",
    "load_config",
    "prepend_changelog_file",
    "resolve_targets",
    "__version__",
]
