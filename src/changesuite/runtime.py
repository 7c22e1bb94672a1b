"""Runtime helpers for ChangeSuite CLI orchestration."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from .config import ChangelogConfig, load_config
from .logging import configure_logging, get_logger


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def prepare_config(
    args: Any, *, loader: Callable[[str], ChangelogConfig] = load_config
) -> ChangelogConfig:
    """Load ChangelogConfig and apply command line overrides from ``args``."""
    if not hasattr(args, "config"):
        raise AttributeError("Command namespace is missing 'config' attribute")
    cfg = loader(args.config)
    filename_override = getattr(args, "changelog_filename", None)
    if filename_override is not None:
        cfg.changelog_filename = filename_override or None
    if getattr(args, "dry_run", False):
        cfg.dry_run = True
    if getattr(args, "json_logs", False):
        cfg.logging_json_enabled = True
    level = "WARNING" if getattr(args, "quiet", False) else cfg.logging_level
    configure_logging(json_logging=cfg.logging_json_enabled, level=level)
    return cfg


def execute_command(handler: _HandlerCallable, command: str, *, dry_run: bool = False) -> int:
    """Execute a command handler inside a timed logging scope."""

    with get_logger().timed_operation(f"cli_{command}", dry_run=dry_run):
        result = handler()
    return int(result) if result is not None else 0


__all__ = ["prepare_config", "execute_command"]
