"""Usage statistics: one-shot read and the live WebSocket stream."""

from __future__ import annotations

from fastapi import APIRouter, Depends, WebSocket

from beamshare.api.deps import get_services, get_stats_store
from beamshare.schemas.system import ServerStatsResponse
from beamshare.services import Services
from beamshare.services.stats_broadcaster import StatsBroadcaster
from beamshare.services.stats_store import StatsStore

router = APIRouter()


@router.get("/stats", response_model=ServerStatsResponse)
async def server_stats(stats: StatsStore = Depends(get_stats_store)):
    row = await stats.get_stats()
    return ServerStatsResponse(
        downloads=row.downloads,
        requests=row.requests,
        uploads=row.uploads,
        start_time=row.start_time,
    )


@router.websocket("/ws/stats")
async def stats_stream(websocket: WebSocket, services: Services = Depends(get_services)):
    """Snapshot on connect, then every refresh interval, with keepalive pings."""
    settings = services.settings
    broadcaster = StatsBroadcaster(
        websocket,
        services.stats_store,
        services.system_monitor,
        refresh_interval=settings.stats_refresh_interval,
        keepalive_interval=settings.stats_keepalive_interval,
        read_deadline=settings.stats_read_deadline,
    )
    await broadcaster.run()
