from __future__ import annotations

import json
import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from changesuite.cli import main
from changesuite.inserter import MARKER

CONFIG = textwrap.dedent(
    """\
    version: 1
    changelog:
      filename: "<packageDir>/CHANGELOG.md"
    workspaces:
      patterns: ["packages/*"]
    """
)

CHANGESET = {
    "pkg-1": {"version": "1.0.0", "changelog": "## 1.0.0\n\n- first release"},
    "pkg-2": {"version": "1.1.0", "changelog": "## 1.1.0\n\n- bump"},
}


@pytest.fixture
def repo(monorepo: Path) -> Path:
    (monorepo / "changesuite.config.yaml").write_text(CONFIG)
    (monorepo / "changeset.json").write_text(json.dumps(CHANGESET))
    return monorepo


def _args(repo: Path, command: str, *extra: str) -> list[str]:
    return [
        "--quiet",
        command,
        "--config",
        str(repo / "changesuite.config.yaml"),
        "--changeset",
        str(repo / "changeset.json"),
        *extra,
    ]


def test_write_creates_per_package_changelogs(repo: Path) -> None:
    summary = repo / "summary.json"

    rc = main(_args(repo, "write", "--summary-json", str(summary)))

    assert rc == 0
    pkg1 = (repo / "packages" / "pkg-1" / "CHANGELOG.md").read_text()
    assert "- first release" in pkg1
    assert "- bump" not in pkg1
    data = json.loads(summary.read_text())
    assert data["dry_run"] is False
    assert sorted(t["packages"][0] for t in data["targets"]) == ["pkg-1", "pkg-2"]
    assert all(t["created"] for t in data["targets"])


def test_write_selected_workspace_only(repo: Path) -> None:
    rc = main(_args(repo, "write", "--workspace", "pkg-2"))

    assert rc == 0
    assert not (repo / "packages" / "pkg-1" / "CHANGELOG.md").exists()
    assert (repo / "packages" / "pkg-2" / "CHANGELOG.md").exists()


def test_write_global_override(repo: Path) -> None:
    (repo / "CHANGELOG.md").write_text(f"# Changelog\n{MARKER}\n")

    rc = main(_args(repo, "write", "--changelog-filename", "CHANGELOG.md"))

    assert rc == 0
    text = (repo / "CHANGELOG.md").read_text()
    assert "- first release" in text
    assert "- bump" in text


def test_validate_reports_missing_marker(
    repo: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    target = repo / "packages" / "pkg-1" / "CHANGELOG.md"
    target.write_text("# hand written\n")

    rc = main(_args(repo, "validate"))

    assert rc == 1
    assert "[changelog.marker]" in capsys.readouterr().err
    assert target.read_text() == "# hand written\n"
    assert not (repo / "packages" / "pkg-2" / "CHANGELOG.md").exists()


def test_validate_passes_without_writing(repo: Path) -> None:
    rc = main(_args(repo, "validate"))

    assert rc == 0
    assert not (repo / "packages" / "pkg-1" / "CHANGELOG.md").exists()


def test_targets_lists_paths(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(_args(repo, "targets"))

    assert rc == 0
    out = capsys.readouterr().out
    assert "pkg-1" + os.sep + "CHANGELOG.md\tpkg-1" in out
    assert "pkg-2" + os.sep + "CHANGELOG.md\tpkg-2" in out


def test_missing_config_exits_with_usage_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    rc = main(
        [
            "write",
            "--config",
            str(tmp_path / "missing.yaml"),
            "--changeset",
            str(tmp_path / "changeset.json"),
        ]
    )

    assert rc == 2
    assert "Configuration file not found" in capsys.readouterr().err


def test_bad_changeset_exits_with_failure(repo: Path) -> None:
    (repo / "changeset.json").write_text("[]")

    assert main(_args(repo, "write")) == 1


def test_unwritable_summary_exits_with_failure(
    repo: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    summary = repo / "missing-dir" / "summary.json"

    rc = main(_args(repo, "write", "--summary-json", str(summary)))

    assert rc == 1
    assert "[filesystem]" in capsys.readouterr().err


def test_module_entrypoint_runs(repo: Path) -> None:
    result = subprocess.run(
        [sys.executable, "-m", "changesuite", *_args(repo, "write", "--dry-run")],
        cwd=repo,
        capture_output=True,
        text=True,
        env=os.environ.copy(),
        check=False,
    )

    assert result.returncode == 0, result.stdout + result.stderr
    assert not (repo / "packages" / "pkg-1" / "CHANGELOG.md").exists()
