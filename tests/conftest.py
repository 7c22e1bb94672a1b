"""Pytest configuration for ChangeSuite tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocesses (`python -m changesuite`) need the same import path.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

from changesuite.logging import configure_logging  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_logger() -> None:
    # Rebind the global handler to the stdout of the current test session.
    configure_logging(level="DEBUG")


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """Two-package repository: packages/pkg-1 and packages/pkg-2."""
    for name in ("pkg-1", "pkg-2"):
        pkg = tmp_path / "packages" / name
        pkg.mkdir(parents=True)
        (pkg / "package.json").write_text(json.dumps({"name": name, "version": "0.0.0"}))
    return tmp_path
