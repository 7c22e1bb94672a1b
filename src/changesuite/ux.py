"""Terminal output helpers for the CLI - no external dependencies."""

from __future__ import annotations

import os
import sys
from typing import TextIO


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if terminal supports it."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def print_success(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("✓", Colors.GREEN, bold=True, stream=stream) + " " + message, file=stream)


def print_error(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    print(colorize("✗", Colors.RED, bold=True, stream=stream) + " " + message, file=stream)


def print_target(status: str, path: str, packages: list[str], stream: TextIO | None = None) -> None:
    """One line per changelog target: status tag, path, affected packages."""
    stream = stream or sys.stdout
    palette = {
        "created": Colors.GREEN,
        "updated": Colors.GREEN,
        "ok": Colors.CYAN,
        "skipped": Colors.DIM,
    }
    tag = colorize(f"[{status}]", palette.get(status, Colors.YELLOW), stream=stream)
    names = ", ".join(packages) if packages else "-"
    print(f"  {tag} {path} ({names})", file=stream)


__all__ = ["Colors", "colorize", "print_success", "print_error", "print_target"]
