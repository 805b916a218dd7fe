"""API route registration."""

from fastapi import APIRouter

from beamshare.api.routes import files, health, operations, stats

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(files.router, tags=["files"])
api_router.include_router(operations.router, tags=["files"])
api_router.include_router(stats.router, tags=["stats"])
