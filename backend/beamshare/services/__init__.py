"""Business logic services, wired once per application, passed explicitly."""

from __future__ import annotations

import logging
from pathlib import Path

from beamshare.config import Settings
from beamshare.database import create_engine, create_session_factory, init_db
from beamshare.services.file_service import FileService
from beamshare.services.stats_store import StatsStore
from beamshare.services.system_service import SystemMonitor

logger = logging.getLogger(__name__)


class Services:
    """Owns the store engine and every service built on it.

    Lives on ``app.state.services``; routes reach it through the
    dependencies in :mod:`beamshare.api.deps`.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = create_engine(
            settings.database_path,
            pool_size=settings.max_db_connections,
            echo=settings.debug and settings.log_level.upper() == "DEBUG",
        )
        self.session_factory = create_session_factory(self.engine)
        self.stats_store = StatsStore(self.session_factory)
        self.file_service = FileService(settings.shared_dir, self.stats_store)
        self.system_monitor = SystemMonitor(settings.shared_dir)

    async def startup(self) -> None:
        """Create the store and its singleton stats row."""
        Path(self.settings.database_path).parent.mkdir(parents=True, exist_ok=True)
        await init_db(self.engine)
        if self.settings.reset_stats_on_startup:
            await self.stats_store.reset_stats()
        else:
            await self.stats_store.ensure_stats()
        logger.info("Services initialized, sharing %s", self.file_service.root)

    async def shutdown(self) -> None:
        await self.engine.dispose()
        logger.info("Services shut down")
