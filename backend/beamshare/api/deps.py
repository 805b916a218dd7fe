"""FastAPI dependency injection — services from the application state."""

from __future__ import annotations

from fastapi.requests import HTTPConnection

from beamshare.services import Services
from beamshare.services.file_service import FileService
from beamshare.services.stats_store import StatsStore


def get_services(conn: HTTPConnection) -> Services:
    """Works for both HTTP requests and WebSocket connections."""
    return conn.app.state.services


def get_file_service(conn: HTTPConnection) -> FileService:
    return get_services(conn).file_service


def get_stats_store(conn: HTTPConnection) -> StatsStore:
    return get_services(conn).stats_store
