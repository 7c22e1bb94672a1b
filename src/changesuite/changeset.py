"""Loading of changesets produced by the version/changelog pipeline.

The upstream pipeline emits one JSON object per release::

    {"pkg-1": {"version": "1.0.0", "changelog": "### Fixes\n..."}}

Only structure is enforced here. Versions that ``packaging`` cannot parse
are still accepted (npm-style semver pre-release tags are not always valid
PEP 440) but a warning is logged so malformed pipelines get noticed.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from packaging.version import InvalidVersion, Version

from .errors import ChangesetError
from .logging import get_logger
from .models import Changeset, ChangesetEntry


def _coerce_entry(ident: str, payload: Any) -> ChangesetEntry:
    if isinstance(payload, ChangesetEntry):
        return payload
    if not isinstance(payload, Mapping):
        raise ChangesetError(f"Changeset entry for {ident!r} must be an object")
    version = payload.get("version")
    changelog = payload.get("changelog")
    if not isinstance(version, str) or not version:
        raise ChangesetError(f"Changeset entry for {ident!r} is missing a version")
    if not isinstance(changelog, str):
        raise ChangesetError(f"Changeset entry for {ident!r} is missing a changelog")
    try:
        Version(version)
    except InvalidVersion:
        get_logger().warning(
            "changeset version does not parse", package=ident, version=version
        )
    return ChangesetEntry(version=version, changelog=changelog)


def build_changeset(raw: Mapping[str, Any]) -> Changeset:
    """Validate a decoded mapping and convert it to a :data:`Changeset`."""
    if not isinstance(raw, Mapping):
        raise ChangesetError("Changeset must be a JSON object keyed by package identifier")
    return {str(ident): _coerce_entry(str(ident), payload) for ident, payload in raw.items()}


def load_changeset(path: str | Path) -> Changeset:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ChangesetError(f"Changeset file not found: {p}") from exc
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ChangesetError(f"Changeset file {p} is not valid JSON: {exc}") from exc
    return build_changeset(raw)


__all__ = ["build_changeset", "load_changeset"]
