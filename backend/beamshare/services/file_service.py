"""File operations confined to the shared directory.

Every client path goes through :func:`resolve_path` before the filesystem is
touched. Blocking filesystem work runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import os
import posixpath
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from beamshare.exceptions import AlreadyExists, BadRequest, InvalidPath, NotFound, OperationFailed
from beamshare.schemas.files import FileEntry
from beamshare.services.search_service import search_files
from beamshare.utils.paths import canonical_client_path, join_client_path, resolve_path
from beamshare.utils.storage import format_file_size, format_mod_time

if TYPE_CHECKING:
    from beamshare.models import StarredFile
    from beamshare.services.stats_store import StatsStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024  # 64 KB


class FileService:
    """List, transfer and rearrange files under one shared root."""

    def __init__(self, shared_dir: str | Path, stats_store: StatsStore):
        self.root = Path(shared_dir).resolve()
        self._stats = stats_store

    def resolve(self, requested: str | None, label: str = "path") -> Path:
        """Resolve a client path, naming the argument in the error."""
        try:
            return resolve_path(self.root, requested)
        except InvalidPath as e:
            logger.warning("Rejected %s %r: %s", label, requested, e)
            raise InvalidPath(f"Invalid {label}") from e

    # --- browsing ---------------------------------------------------------

    async def browse(self, path: str | None) -> Path | list[FileEntry]:
        """Regular file → its resolved path; directory → its direct children."""
        target = self.resolve(path)
        if await asyncio.to_thread(target.is_file):
            return target
        entries = await asyncio.to_thread(self._scan_directory, target, path or "")
        return await self._with_stars(entries)

    def _scan_directory(self, target: Path, requested: str) -> list[FileEntry]:
        logger.debug("Listing files in %s", target)
        try:
            with os.scandir(target) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.error("Failed to read directory %s: %s", target, e)
            raise OperationFailed(f"Failed to read directory: {e.strerror or e}") from e

        entries = []
        for child in children:
            try:
                info = child.stat(follow_symlinks=False)
            except OSError:
                continue
            entries.append(FileEntry(
                name=child.name,
                size=format_file_size(info.st_size),
                is_dir=child.is_dir(follow_symlinks=False),
                mod_time=format_mod_time(info.st_mtime),
                path=join_client_path(requested, child.name),
            ))
        return entries

    async def _with_stars(self, entries: list[FileEntry]) -> list[FileEntry]:
        starred = await self._stats.starred_among(
            canonical_client_path(e.path) for e in entries
        )
        if not starred:
            return entries
        return [
            e.model_copy(update={"is_starred": True}) if canonical_client_path(e.path) in starred else e
            for e in entries
        ]

    async def search(self, query: str | None, path: str | None = None) -> list[FileEntry]:
        if not query:
            raise BadRequest("Search query is required")
        target = self.resolve(path, "search path")
        results = await asyncio.to_thread(search_files, target, query, path or "")
        logger.info(
            "Search completed for query '%s' in path '%s', found %d results",
            query, path or "", len(results),
        )
        return await self._with_stars(results)

    # --- transfers --------------------------------------------------------

    async def open_download(self, filename: str | None) -> Path:
        """Resolved path of a regular file to stream back to the client."""
        target = self.resolve(filename, "file path")
        if not await asyncio.to_thread(target.is_file):
            logger.error("Download target is not a file: %s", target)
            raise NotFound("File not found")
        logger.info("Serving download for file: %s", filename)
        return target

    async def save_upload(self, filename: str | None, source: BinaryIO) -> Path:
        """Write an uploaded stream to ``filename``, creating or overwriting it."""
        if not filename:
            raise BadRequest("Invalid upload")
        target = self.resolve(filename, "file name")
        await asyncio.to_thread(self._write_stream, target, source)
        await self._stats.increment_uploads()
        logger.info("File uploaded successfully: %s", filename)
        return target

    @staticmethod
    def _write_stream(target: Path, source: BinaryIO) -> None:
        try:
            out = open(target, "wb")
        except OSError as e:
            logger.error("Failed to create file %s: %s", target, e)
            raise OperationFailed("Failed to save file") from e
        with out:
            try:
                shutil.copyfileobj(source, out, CHUNK_SIZE)
            except OSError as e:
                logger.error("Failed to write file %s: %s", target, e)
                raise OperationFailed("Failed to write file") from e

    # --- rearranging ------------------------------------------------------

    async def move(self, source: str, target: str) -> None:
        src = self.resolve(source, "source path")
        dst = self.resolve(target, "target path")
        await asyncio.to_thread(self._move, src, dst)
        logger.info("File moved from %s to %s", source, target)

    def _move(self, src: Path, dst: Path) -> None:
        if not os.path.lexists(src):
            raise NotFound("Source file not found")
        if src == self.root:
            raise InvalidPath("Cannot move the shared directory")
        try:
            os.replace(src, dst)
        except OSError as e:
            logger.error("Failed to move file from %s to %s: %s", src, dst, e)
            raise OperationFailed("Failed to move file") from e

    async def copy(self, source: str, target: str) -> None:
        src = self.resolve(source, "source path")
        dst = self.resolve(target, "target path")
        if src == dst:
            raise BadRequest("Source and target are the same file")
        await asyncio.to_thread(self._copy, src, dst)
        logger.info("File copied from %s to %s", source, target)

    @staticmethod
    def _copy(src: Path, dst: Path) -> None:
        if src.is_dir():
            raise BadRequest("Source is a directory")
        try:
            fsrc = open(src, "rb")
        except OSError as e:
            logger.error("Failed to open source file %s: %s", src, e)
            raise NotFound("Source file not found") from e
        with fsrc:
            try:
                fdst = open(dst, "wb")
            except OSError as e:
                logger.error("Failed to create target file %s: %s", dst, e)
                raise OperationFailed("Failed to create target file") from e
            with fdst:
                try:
                    shutil.copyfileobj(fsrc, fdst, CHUNK_SIZE)
                except OSError as e:
                    logger.error("Failed to copy file from %s to %s: %s", src, dst, e)
                    raise OperationFailed(
                        "Failed to copy file; the target may be partially written"
                    ) from e

    async def mkdir(self, dir_path: str) -> None:
        target = self.resolve(dir_path, "directory path")
        await asyncio.to_thread(self._mkdir, target)
        logger.info("Directory created: %s", dir_path)

    @staticmethod
    def _mkdir(target: Path) -> None:
        if os.path.lexists(target):
            raise AlreadyExists("Directory already exists")
        try:
            os.makedirs(target)
        except FileExistsError as e:
            raise AlreadyExists("Directory already exists") from e
        except OSError as e:
            logger.error("Failed to create directory %s: %s", target, e)
            raise OperationFailed("Failed to create directory") from e

    async def rename(self, old_path: str, new_name: str) -> str:
        """Rename in place; returns the new client path."""
        if not new_name:
            raise BadRequest("New name is required")
        old = self.resolve(old_path, "old path")
        if not await asyncio.to_thread(os.path.lexists, old):
            raise NotFound("File or directory not found")
        if old == self.root:
            raise InvalidPath("Cannot rename the shared directory")

        parent = posixpath.dirname(old_path.replace("\\", "/").rstrip("/"))
        new_path = new_name if parent in ("", ".") else posixpath.join(parent, new_name)
        new = self.resolve(new_path, "new name")

        await asyncio.to_thread(self._rename, old, new)
        logger.info("Renamed %s to %s", old_path, new_path)
        return new_path

    @staticmethod
    def _rename(old: Path, new: Path) -> None:
        if os.path.lexists(new):
            raise AlreadyExists("Target name already exists")
        try:
            os.rename(old, new)
        except OSError as e:
            logger.error("Failed to rename %s to %s: %s", old, new, e)
            raise OperationFailed("Failed to rename") from e

    async def write(self, file_path: str, content: str) -> None:
        """Replace the file body with ``content``, creating parents as needed."""
        if not file_path:
            raise BadRequest("File path is required")
        target = self.resolve(file_path, "file path")
        await asyncio.to_thread(self._write_text, target, content)
        logger.info("File written successfully: %s", file_path)

    @staticmethod
    def _write_text(target: Path, content: str) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create parent directory %s: %s", target.parent, e)
            raise OperationFailed("Failed to create parent directory") from e
        try:
            target.write_bytes(content.encode("utf-8"))
        except OSError as e:
            logger.error("Failed to write file %s: %s", target, e)
            raise OperationFailed("Failed to write file") from e

    # --- starred files ----------------------------------------------------

    async def set_star(self, file_path: str, starred: bool | None = None) -> bool:
        """Star, unstar, or (``starred=None``) toggle. Returns the new state."""
        target = self.resolve(file_path, "file path")
        key = canonical_client_path(file_path)
        if starred is None:
            starred = not await self._stats.is_starred(key)

        if starred:
            if not await asyncio.to_thread(os.path.lexists, target):
                raise NotFound("File not found")
            await self._stats.star(key)
        else:
            await self._stats.unstar(key)
        return starred

    async def list_starred(self) -> list[StarredFile]:
        return await self._stats.list_starred()
