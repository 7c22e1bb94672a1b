from __future__ import annotations

import json
from pathlib import Path

import pytest

from changesuite.config import ChangelogConfig
from changesuite.errors import WorkspaceNotFoundError
from changesuite.models import Workspace
from changesuite.project import Project


def test_discover_package_json_workspaces(monorepo: Path) -> None:
    project = Project.discover(monorepo, ["packages/*"])

    assert sorted(w.ident for w in project) == ["pkg-1", "pkg-2"]
    assert project.get_workspace_by_ident("pkg-1").cwd == (monorepo / "packages" / "pkg-1").resolve()


def test_discover_pyproject_workspace(tmp_path: Path) -> None:
    lib = tmp_path / "libs" / "core"
    lib.mkdir(parents=True)
    (lib / "pyproject.toml").write_text('[project]\nname = "core-lib"\nversion = "0.1.0"\n')

    project = Project.discover(tmp_path, ["libs/*"])

    assert "core-lib" in project
    assert len(project) == 1


def test_directories_without_manifest_are_ignored(tmp_path: Path) -> None:
    (tmp_path / "packages" / "empty").mkdir(parents=True)
    (tmp_path / "packages" / "broken").mkdir(parents=True)
    (tmp_path / "packages" / "broken" / "package.json").write_text("{oops")

    assert len(Project.discover(tmp_path, ["packages/*"])) == 0


def test_explicit_packages_override_discovery(monorepo: Path) -> None:
    (monorepo / "elsewhere").mkdir()

    project = Project.discover(monorepo, ["packages/*"], {"pkg-1": "elsewhere"})

    assert project.get_workspace_by_ident("pkg-1").cwd == (monorepo / "elsewhere").resolve()


def test_from_config(monorepo: Path) -> None:
    cfg = ChangelogConfig(
        root=monorepo, changelog_filename=None, workspace_patterns=["packages/*"]
    )

    assert len(Project.from_config(cfg)) == 2


def test_unknown_ident_raises(tmp_path: Path) -> None:
    project = Project(tmp_path, [Workspace("a", tmp_path)])

    with pytest.raises(WorkspaceNotFoundError) as excinfo:
        project.get_workspace_by_ident("b")
    assert excinfo.value.ident == "b"


def test_duplicate_identifier_keeps_first(tmp_path: Path) -> None:
    for name in ("a", "b"):
        pkg = tmp_path / "packages" / name
        pkg.mkdir(parents=True)
        (pkg / "package.json").write_text(json.dumps({"name": "same"}))

    project = Project.discover(tmp_path, ["packages/*"])

    assert project.get_workspace_by_ident("same").cwd.name == "a"
