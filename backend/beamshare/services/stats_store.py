"""Durable usage counters and the starred-file set."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from beamshare.exceptions import StoreError
from beamshare.models import STATS_ROW_ID, ServerStats, StarredFile

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("downloads", "uploads", "requests")
_IN_CHUNK = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StatsStore:
    """Owns the ``server_stats`` singleton row and the ``starred_files`` table.

    Each counter bump is one ``UPDATE ... SET c = c + 1`` statement, so
    concurrent increments never lose updates.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # --- counters ---------------------------------------------------------

    async def ensure_stats(self) -> None:
        """Create the singleton row if absent. Called once at startup."""
        async with self._session_factory() as db:
            if await db.get(ServerStats, STATS_ROW_ID) is None:
                db.add(ServerStats(id=STATS_ROW_ID, start_time=_utcnow()))
                await db.commit()
                logger.info("Created server stats row")

    async def get_stats(self) -> ServerStats:
        try:
            async with self._session_factory() as db:
                stats = await db.get(ServerStats, STATS_ROW_ID)
        except SQLAlchemyError as e:
            raise StoreError("Failed to get server stats") from e
        if stats is None:
            raise StoreError("Server stats row is missing")
        return stats

    async def reset_stats(self) -> ServerStats:
        """Zero all counters and restart the session clock."""
        async with self._session_factory() as db:
            stats = await db.get(ServerStats, STATS_ROW_ID)
            if stats is None:
                stats = ServerStats(id=STATS_ROW_ID)
                db.add(stats)
            stats.downloads = 0
            stats.uploads = 0
            stats.requests = 0
            stats.start_time = _utcnow()
            await db.commit()
        logger.info("Server stats reset")
        return stats

    async def _increment(self, field: str) -> None:
        column = getattr(ServerStats, field)
        async with self._session_factory() as db:
            result = await db.execute(
                update(ServerStats)
                .where(ServerStats.id == STATS_ROW_ID)
                .values({column: column + 1})
            )
            await db.commit()
        if result.rowcount == 0:
            logger.warning("Cannot increment %s: server stats row is missing", field)

    async def increment_downloads(self) -> None:
        await self._increment("downloads")

    async def increment_uploads(self) -> None:
        await self._increment("uploads")

    async def increment_requests(self) -> None:
        await self._increment("requests")

    async def increment(self, field: str) -> None:
        """Increment a counter by name; unknown names are ignored."""
        if field not in COUNTER_FIELDS:
            logger.warning("Unknown stats field: %s", field)
            return
        await self._increment(field)

    # --- starred files ----------------------------------------------------

    async def star(self, file_path: str) -> None:
        """Insert if absent."""
        async with self._session_factory() as db:
            existing = await db.execute(
                select(StarredFile.id).where(StarredFile.file_path == file_path)
            )
            if existing.scalar_one_or_none() is not None:
                return
            db.add(StarredFile(file_path=file_path, created_at=_utcnow()))
            try:
                await db.commit()
            except IntegrityError:
                # Lost a race with a concurrent star of the same path.
                await db.rollback()
                return
        logger.info("File starred: %s", file_path)

    async def unstar(self, file_path: str) -> None:
        """Delete if present; absence is not an error."""
        async with self._session_factory() as db:
            result = await db.execute(
                delete(StarredFile).where(StarredFile.file_path == file_path)
            )
            await db.commit()
        if result.rowcount:
            logger.info("File unstarred: %s", file_path)
        else:
            logger.debug("File was not starred: %s", file_path)

    async def is_starred(self, file_path: str) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                select(StarredFile.id).where(StarredFile.file_path == file_path)
            )
            return result.scalar_one_or_none() is not None

    async def starred_among(self, file_paths: Iterable[str]) -> set[str]:
        """Subset of ``file_paths`` that are starred, in one query."""
        paths = list(file_paths)
        found: set[str] = set()
        if not paths:
            return found
        async with self._session_factory() as db:
            # Stay under SQLite's bound-parameter limit on huge directories.
            for i in range(0, len(paths), _IN_CHUNK):
                result = await db.execute(
                    select(StarredFile.file_path).where(
                        StarredFile.file_path.in_(paths[i:i + _IN_CHUNK])
                    )
                )
                found.update(result.scalars().all())
        return found

    async def list_starred(self) -> list[StarredFile]:
        """All starred files, newest first."""
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(StarredFile).order_by(StarredFile.created_at.desc(), StarredFile.id.desc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError("Failed to get starred files") from e
