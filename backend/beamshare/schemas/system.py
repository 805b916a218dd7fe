"""Stats and system status schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MemoryStats(BaseModel):
    total: int
    available: int
    used: int
    percent: float


class DiskStats(BaseModel):
    """Usage of the filesystem holding the shared directory."""
    total: int = 0
    free: int = 0
    used: int = 0
    percent: float = 0.0


class CpuStats(BaseModel):
    cores: int
    tasks: int  # live asyncio tasks in this process


class SystemStats(BaseModel):
    memory: MemoryStats
    disk: DiskStats
    cpu: CpuStats


class ServerStatsResponse(BaseModel):
    """Persisted usage counters."""
    model_config = ConfigDict(populate_by_name=True)

    downloads: int
    requests: int
    uploads: int
    start_time: datetime = Field(alias="startTime")

    @field_validator("start_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; they are stored as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class StatsSnapshot(ServerStatsResponse):
    """Frame pushed over the stats stream."""
    system: SystemStats


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "beamshare"
    version: str


class ReadinessResponse(BaseModel):
    status: str
    service: str = "beamshare"
    checks: dict[str, str]
