"""Marker-based insertion of changelog entries.

Changelog files opt in to automated updates by carrying the marker line::

    <!-- MONODEPLOY:BELOW -->

New entries are spliced in directly below the first occurrence of the
marker, so the most recent release always sits on top and everything that
was already in the file keeps its order. A file without the marker is
treated as hand-maintained and is never modified.

An existing target is held under a non-blocking exclusive ``flock`` for the
whole read-modify-write. If another process already holds the lock, or the
locked handle no longer refers to the file at the path (another writer
replaced it meanwhile), the insert fails fast with
:class:`UnreadableFileError` rather than working on stale content.

Symlinks are followed: the real file is updated and the link is kept. The
new content is written to a temporary file beside the real file, given the
original permission bits, and moved over it, so a failed write never leaves
a truncated changelog behind. New files are created exclusively.
"""

from __future__ import annotations

import fcntl
import os
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .errors import MissingMarkerError, UnreadableFileError
from .logging import get_logger
from .models import Changeset

MARKER = "<!-- MONODEPLOY:BELOW -->"


@dataclass(frozen=True)
class InsertOutcome:
    path: Path
    content: str
    created: bool
    written: bool


@contextmanager
def _exclusive_lock(handle: TextIO, path: Path) -> Iterator[None]:
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError as exc:
        raise UnreadableFileError(path, "file is locked by another process") from exc
    try:
        yield
    finally:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def render_entries(changeset: Changeset) -> str:
    """Join the changelog text of every entry, in changeset order."""
    blocks = [entry.changelog.rstrip("\n") for entry in changeset.values()]
    return "\n".join(block for block in blocks if block)


def splice(content: str, block: str, marker: str = MARKER) -> str:
    """Place ``block`` on the line after the first ``marker`` in ``content``."""
    index = content.find(marker)
    if index < 0:
        raise ValueError("marker not present in content")
    end = index + len(marker)
    return f"{content[:end]}\n{block}\n{content[end:]}"


def _same_file(handle: TextIO, target: Path) -> bool:
    opened = os.fstat(handle.fileno())
    try:
        current = target.stat()
    except FileNotFoundError:
        return False
    return (opened.st_dev, opened.st_ino) == (current.st_dev, current.st_ino)


@contextmanager
def _lock_for_update(handle: TextIO, target: Path, path: Path) -> Iterator[None]:
    """Exclusive lock on ``handle``, valid only while it is still the file at ``target``.

    A writer that opened the file before another writer replaced it ends up
    locking the unlinked inode; it must not read or write through it.
    """
    with _exclusive_lock(handle, path):
        if not _same_file(handle, target):
            raise UnreadableFileError(path, "file was replaced while waiting for the lock")
        yield


def _write_atomic(target: Path, content: str) -> None:
    tmp = target.with_name(f".{target.name}.tmp")
    try:
        with tmp.open("w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        shutil.copymode(target, tmp)
        tmp.replace(target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _create_exclusive(target: Path, path: Path, content: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        handle = target.open("x", encoding="utf-8", newline="")
    except FileExistsError as exc:
        raise UnreadableFileError(path, "file was created by another process") from exc
    with handle, _exclusive_lock(handle, path):
        try:
            handle.write(content)
            handle.flush()
        except BaseException:
            target.unlink(missing_ok=True)
            raise


def insert_changelog(
    path: Path,
    changeset: Changeset,
    *,
    dry_run: bool = False,
    marker: str = MARKER,
) -> InsertOutcome:
    logger = get_logger()
    block = render_entries(changeset)
    # Symlinked changelogs are updated in place of their real file.
    target = path.resolve()
    try:
        handle = target.open("r", encoding="utf-8", newline="")
    except FileNotFoundError:
        content = splice(marker, block, marker)
        if dry_run:
            logger.debug("changelog would be created", target=str(path))
            return InsertOutcome(path=path, content=content, created=False, written=False)
        _create_exclusive(target, path, content)
        return InsertOutcome(path=path, content=content, created=True, written=True)
    except OSError as exc:
        raise UnreadableFileError(path, exc.strerror or str(exc)) from exc

    with handle, _lock_for_update(handle, target, path):
        try:
            current = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise UnreadableFileError(path, str(exc)) from exc
        if marker not in current:
            raise MissingMarkerError(path, marker)
        content = splice(current, block, marker)
        if dry_run:
            return InsertOutcome(path=path, content=content, created=False, written=False)
        _write_atomic(target, content)
    return InsertOutcome(path=path, content=content, created=False, written=True)


__all__ = ["MARKER", "InsertOutcome", "render_entries", "splice", "insert_changelog"]
