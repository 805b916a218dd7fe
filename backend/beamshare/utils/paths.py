"""Confine client-supplied paths to the shared root."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path

from beamshare.exceptions import InvalidPath, PathTraversal


def normalize_client_path(requested: str) -> str:
    """Lexically clean a client path: ``/`` separators, no ``.``/``..`` runs.

    A leading ``/`` means the shared root, not the host root.
    """
    return posixpath.normpath(requested.replace("\\", "/")).lstrip("/") or "."


def resolve_path(shared_root: str | Path, requested: str | None) -> Path:
    """Map ``requested`` onto ``shared_root``.

    Both sides are canonicalised with ``Path.resolve()`` (symlinks followed)
    before the containment check, so a link pointing outside the root is
    rejected like a ``..`` traversal.

    Raises:
        PathTraversal: the canonical result lies outside the root.
        InvalidPath: the path cannot be represented on this OS or crosses a
            symlink loop.
    """
    if requested and "\x00" in requested:
        raise InvalidPath(f"Invalid path: {requested!r}")
    try:
        root = Path(shared_root).resolve()
        if not requested:
            return root
        target = (root / normalize_client_path(requested)).resolve()
    except (ValueError, OSError, RuntimeError) as exc:
        # RuntimeError: symlink loop (Python < 3.13)
        raise InvalidPath(f"Invalid path: {requested!r}") from exc

    root_str = str(root)
    prefix = root_str if root_str.endswith(os.sep) else root_str + os.sep
    target_str = str(target)
    if target_str != root_str and not target_str.startswith(prefix):
        raise PathTraversal("Path traversal attempt")
    return target


def client_path(shared_root: str | Path, resolved: Path) -> str:
    """Posix-style path of ``resolved`` relative to the root (``""`` for the root)."""
    rel = resolved.relative_to(Path(shared_root).resolve())
    rel_str = rel.as_posix()
    return "" if rel_str == "." else rel_str


def join_client_path(parent: str | None, name: str) -> str:
    """Join a client directory and a child name the way listings report paths."""
    if not parent:
        return name
    return posixpath.join(parent.replace("\\", "/"), name)


def canonical_client_path(requested: str | None) -> str:
    """``a//b``, ``./a/b`` and ``/a/b`` all become ``a/b``; also the starred-set key."""
    if not requested:
        return ""
    key = normalize_client_path(requested)
    return "" if key == "." else key
