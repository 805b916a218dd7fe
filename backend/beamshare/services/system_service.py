"""Host resource snapshot: memory, disk, CPU cores, live tasks."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import psutil

from beamshare.schemas.system import CpuStats, DiskStats, MemoryStats, SystemStats

logger = logging.getLogger(__name__)


class SystemMonitor:
    """Point-in-time resource readings for the stats stream."""

    def __init__(self, shared_dir: str | Path):
        self._shared_dir = str(shared_dir)

    def memory(self) -> MemoryStats:
        mem = psutil.virtual_memory()
        return MemoryStats(
            total=mem.total,
            available=mem.available,
            used=mem.used,
            percent=mem.percent,
        )

    def disk(self) -> DiskStats:
        """Usage of the volume holding the shared directory."""
        try:
            usage = psutil.disk_usage(self._shared_dir)
        except OSError as e:
            logger.error("Failed to get disk stats for %s: %s", self._shared_dir, e)
            return DiskStats()
        return DiskStats(
            total=usage.total,
            free=usage.free,
            used=usage.used,
            percent=usage.percent,
        )

    def cpu(self) -> CpuStats:
        try:
            tasks = len(asyncio.all_tasks())
        except RuntimeError:  # no running loop
            tasks = 0
        return CpuStats(cores=psutil.cpu_count() or 1, tasks=tasks)

    def snapshot(self) -> SystemStats:
        return SystemStats(memory=self.memory(), disk=self.disk(), cpu=self.cpu())
