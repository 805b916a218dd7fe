"""Liveness and readiness probes."""

import logging
import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from beamshare import __version__
from beamshare.api.deps import get_services
from beamshare.schemas.system import HealthResponse, ReadinessResponse
from beamshare.services import Services

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight liveness check."""
    return HealthResponse(version=__version__)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(services: Services = Depends(get_services)):
    """Database reachable and shared directory readable."""
    checks: dict[str, str] = {}

    try:
        async with services.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        checks["database"] = f"error: {e}"

    shared = services.file_service.root
    if not shared.is_dir():
        checks["shared_directory"] = "error: not a directory"
    elif not os.access(shared, os.R_OK | os.X_OK):
        checks["shared_directory"] = "error: not readable"
    else:
        checks["shared_directory"] = "ok"

    ready = all(v == "ok" for v in checks.values())
    body = ReadinessResponse(status="ready" if ready else "not ready", checks=checks)
    if not ready:
        logger.warning("Readiness check failed: %s", checks)
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
