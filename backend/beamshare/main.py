"""beamshare FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from beamshare import __version__
from beamshare.config import Settings, get_settings
from beamshare.exceptions import BeamshareError
from beamshare.services import Services
from beamshare.utils.network import find_available_port, get_local_ip

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    services: Services = app.state.services
    _setup_logging(services.settings)

    await services.startup()
    logger.info("beamshare v%s started, sharing %s", __version__, services.settings.shared_dir)
    try:
        yield
    finally:
        await services.shutdown()
        logger.info("beamshare shutting down")


def _setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


async def _beamshare_error_handler(request: Request, exc: BeamshareError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory."""
    from beamshare.api.routes import api_router

    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )
    app.state.services = Services(settings)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _count_requests(request: Request, call_next):
        try:
            await app.state.services.stats_store.increment_requests()
        except SQLAlchemyError as e:
            logger.warning("Failed to count request: %s", e)
        return await call_next(request)

    app.add_exception_handler(BeamshareError, _beamshare_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()


def run(settings: Settings | None = None) -> None:
    import uvicorn

    settings = settings or get_settings()
    _setup_logging(settings)

    if settings.password_enabled:
        # Accepted for CLI compatibility; requests are not authenticated.
        logger.info("Password is enabled")

    port = find_available_port(settings.port)
    logger.info(
        "Server started at http://%s:%d sharing directory: %s",
        get_local_ip(), port, settings.shared_dir,
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
