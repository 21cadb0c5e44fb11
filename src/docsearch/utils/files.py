"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Iterator, Set, Tuple

LOGGER = logging.getLogger(__name__)


def iter_document_paths(root: Path, *, extension: str = ".html") -> Iterator[Path]:
    """Yield absolute paths of files ending in ``extension`` below ``root``.

    The walk is depth-first with entries sorted by name. A missing or
    unreadable root yields nothing, and unreadable sub-directories are
    skipped. Each directory is entered at most once so symlink cycles
    terminate.
    """
    root = Path(root).expanduser().absolute()
    suffix = extension.lower()
    visited: Set[Tuple[int, int]] = set()
    yield from _walk(root, suffix, visited)


def _walk(directory: Path, suffix: str, visited: Set[Tuple[int, int]]) -> Iterator[Path]:
    try:
        stat = directory.stat()
    except OSError as exc:
        LOGGER.debug("Cannot stat %s: %s", directory, exc)
        return

    key = (stat.st_dev, stat.st_ino)
    if key in visited:
        LOGGER.debug("Skipping already visited directory %s", directory)
        return
    visited.add(key)

    try:
        with os.scandir(directory) as scanner:
            entries = sorted(scanner, key=lambda entry: entry.name)
    except OSError as exc:
        LOGGER.debug("Cannot list %s: %s", directory, exc)
        return

    for entry in entries:
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
        except OSError:
            continue
        path = directory / entry.name
        if is_dir:
            yield from _walk(path, suffix, visited)
        elif is_file and entry.name.lower().endswith(suffix):
            yield path


def has_documents(root: Path, *, extension: str = ".html") -> bool:
    """Return True if at least one matching file exists below ``root``."""
    return next(iter_document_paths(root, extension=extension), None) is not None


def compute_fingerprint(root: Path, *parts: object) -> str:
    """Compute a SHA256 fingerprint of a corpus root and the options it was built with."""
    sha = hashlib.sha256()
    sha.update(str(Path(root).expanduser().resolve()).encode("utf-8"))
    for part in parts:
        sha.update(b"\0")
        sha.update(repr(part).encode("utf-8"))
    return sha.hexdigest()
