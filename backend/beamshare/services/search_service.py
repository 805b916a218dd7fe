"""Recursive name search under a resolved directory."""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Iterator
from pathlib import Path

from beamshare.schemas.files import FileEntry
from beamshare.utils.paths import canonical_client_path, client_path
from beamshare.utils.storage import format_file_size, format_mod_time

logger = logging.getLogger(__name__)


def _walk(directory: str) -> Iterator[tuple[os.DirEntry, os.stat_result]]:
    """Depth-first, lexical-order walk that skips whatever it cannot read."""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning("Error accessing path %s: %s", directory, e)
        return

    for entry in entries:
        try:
            info = entry.stat(follow_symlinks=False)
        except OSError as e:
            logger.warning("Error accessing path %s: %s", entry.path, e)
            continue
        yield entry, info
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)


def search_files(resolved_root: Path, query: str, client_root: str = "") -> list[FileEntry]:
    """Entries under ``resolved_root`` whose base name contains ``query``.

    Matching is case-insensitive and name-only. The root itself is never
    returned; reported paths are ``client_root``-relative with ``/``
    separators.
    """
    needle = query.lower()
    base = canonical_client_path(client_root)
    root = str(resolved_root)
    results: list[FileEntry] = []

    for entry, info in _walk(root):
        if needle not in entry.name.lower():
            continue
        rel = client_path(resolved_root, Path(entry.path))
        results.append(FileEntry(
            name=entry.name,
            size=format_file_size(info.st_size),
            is_dir=entry.is_dir(follow_symlinks=False),
            mod_time=format_mod_time(info.st_mtime),
            path=posixpath.join(base, rel) if base else rel,
        ))
    return results
