from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

try:
    import yaml
except Exception:  # pragma: no cover
    yaml = cast(Any, None)

from .errors import ChangelogError

CONFIG_DEFAULT = 'changesuite.config.yaml'


class ConfigError(ChangelogError):
    pass


@dataclass
class ChangelogConfig:
    root: Path
    # None / empty disables changelog writing entirely
    changelog_filename: str | None
    dry_run: bool = False
    workspace_patterns: list[str] = field(default_factory=list)
    workspace_packages: dict[str, str] = field(default_factory=dict)
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = 'INFO'
    # Concurrency configuration
    concurrency_enabled: bool = False
    concurrency_max_workers: int = 4


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)  # Fallback to original if not found
    return value


def _as_mapping(raw: Any, section: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    return cast(dict[str, Any], raw)


def load_config(path: str | Path) -> ChangelogConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    if yaml is None:
        raise ConfigError('PyYAML not installed; pip install PyYAML')
    try:
        loaded = yaml.safe_load(p.read_text(encoding='utf-8'))
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    raw = _as_mapping(loaded, 'root')
    changelog = _as_mapping(raw.get('changelog'), 'changelog')
    behavior = _as_mapping(raw.get('behavior'), 'behavior')
    workspaces = _as_mapping(raw.get('workspaces'), 'workspaces')
    logging_config = _as_mapping(raw.get('logging'), 'logging')
    concurrency_config = _as_mapping(raw.get('concurrency'), 'concurrency')

    filename = _resolve_env_var(changelog.get('filename'))
    if filename is not None and not isinstance(filename, str):
        raise ConfigError("'changelog.filename' must be a string")

    patterns = workspaces.get('patterns', []) or []
    if isinstance(patterns, str):
        patterns = [patterns]
    packages = _as_mapping(workspaces.get('packages'), 'workspaces.packages')

    try:
        max_workers = int(concurrency_config.get('max_workers', 4))
    except (TypeError, ValueError) as exc:
        raise ConfigError("'concurrency.max_workers' must be an integer") from exc
    if max_workers < 1:
        raise ConfigError("'concurrency.max_workers' must be at least 1")

    return ChangelogConfig(
        root=p.resolve().parent,
        changelog_filename=filename or None,
        dry_run=bool(behavior.get('dry_run_default', False)),
        workspace_patterns=[str(item) for item in patterns],
        workspace_packages={str(k): str(v) for k, v in packages.items()},
        # Logging configuration
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
        # Concurrency configuration
        concurrency_enabled=bool(concurrency_config.get('enabled', False)),
        concurrency_max_workers=max_workers,
    )


__all__ = ['CONFIG_DEFAULT', 'ConfigError', 'ChangelogConfig', 'load_config']
