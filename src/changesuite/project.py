"""Workspace discovery for monorepos.

A :class:`Project` is the lookup the writer uses to turn package identifiers
into on-disk roots. Workspaces come from two config-driven sources:

    * ``workspaces.patterns``: glob patterns relative to the project root.
      Each matching directory holding a ``package.json`` (``name``) or a
      ``pyproject.toml`` (``[project].name``) becomes a workspace.
    * ``workspaces.packages``: an explicit ``ident -> directory`` mapping,
      which wins over discovered entries with the same identifier.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from .config import ChangelogConfig
from .errors import WorkspaceNotFoundError
from .logging import get_logger
from .models import Workspace


def _read_manifest_name(directory: Path) -> str | None:
    package_json = directory / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            get_logger().warning("unreadable package.json", path=str(package_json), error=str(exc))
            return None
        name = data.get("name") if isinstance(data, dict) else None
        return name if isinstance(name, str) and name else None
    pyproject = directory / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            get_logger().warning("unreadable pyproject.toml", path=str(pyproject), error=str(exc))
            return None
        name = data.get("project", {}).get("name")
        return name if isinstance(name, str) and name else None
    return None


class Project:
    def __init__(self, root: Path, workspaces: Iterable[Workspace] = ()) -> None:
        self.root = root.resolve()
        self._by_ident: dict[str, Workspace] = {}
        for workspace in workspaces:
            self._by_ident[workspace.ident] = workspace

    @classmethod
    def discover(
        cls,
        root: Path,
        patterns: Iterable[str] = (),
        packages: Mapping[str, str] | None = None,
    ) -> Project:
        root = root.resolve()
        found: dict[str, Workspace] = {}
        for pattern in patterns:
            for candidate in sorted(root.glob(pattern)):
                if not candidate.is_dir():
                    continue
                ident = _read_manifest_name(candidate)
                if ident is None:
                    continue
                if ident in found and found[ident].cwd != candidate.resolve():
                    get_logger().warning(
                        "duplicate workspace identifier",
                        ident=ident,
                        first=str(found[ident].cwd),
                        second=str(candidate),
                    )
                    continue
                found[ident] = Workspace(ident=ident, cwd=candidate.resolve())
        for ident, directory in (packages or {}).items():
            found[ident] = Workspace(ident=ident, cwd=(root / directory).resolve())
        get_logger().debug("workspaces discovered", count=len(found))
        return cls(root, found.values())

    @classmethod
    def from_config(cls, cfg: ChangelogConfig) -> Project:
        return cls.discover(cfg.root, cfg.workspace_patterns, cfg.workspace_packages)

    @property
    def workspaces(self) -> list[Workspace]:
        return list(self._by_ident.values())

    def get_workspace_by_ident(self, ident: str) -> Workspace:
        try:
            return self._by_ident[ident]
        except KeyError:
            raise WorkspaceNotFoundError(ident) from None

    def __contains__(self, ident: object) -> bool:
        return ident in self._by_ident

    def __iter__(self) -> Iterator[Workspace]:
        return iter(self._by_ident.values())

    def __len__(self) -> int:
        return len(self._by_ident)


__all__ = ["Project"]
