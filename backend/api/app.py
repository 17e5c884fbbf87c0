"""FastAPI application factory"""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .core.config import get_settings
from .core.database import close_repository, get_database_manager, get_repository, init_repository
from .core.logging import setup_logging
from .routers import stats_router

logger = logging.getLogger(__name__)

SERVICE_NAME = "lobbywatch-api"
VERSION = "1.0.0"

_start_time: float = time.time()
_retry_task: asyncio.Task | None = None


async def _repository_retry_loop(settings) -> None:
    """Keep trying to open the history store after a failed startup."""
    delay = 5
    while get_repository() is None:
        await asyncio.sleep(delay)
        try:
            await init_repository(settings)
            logger.info("History store connected (background retry)")
        except Exception as e:
            delay = min(delay * 2, 60)
            logger.warning(f"History store retry failed: {type(e).__name__}: {e}, next retry in {delay}s")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    global _start_time, _retry_task
    _start_time = time.time()
    settings = get_settings()

    logger.info("Starting lobbywatch API server")
    logger.info(f"Environment: {settings.environment}")
    try:
        await init_repository(settings)
    except Exception as e:
        # Endpoints answer 503 until the store is reachable
        logger.error(f"History store unavailable at startup: {type(e).__name__}: {e}, retrying in background")
        _retry_task = asyncio.create_task(_repository_retry_loop(settings))

    yield

    logger.info("Shutting down lobbywatch API server")
    if _retry_task:
        _retry_task.cancel()
    await close_repository()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="lobbywatch API",
        description="Read-only player and lobby statistics",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(stats_router.router)

    @app.get("/")
    async def root():
        return {"service": SERVICE_NAME, "status": "running"}

    @app.get("/health")
    async def health():
        """Liveness check (no storage dependency)"""
        return {"status": "healthy", "uptime_seconds": int(time.time() - _start_time)}

    @app.get("/status")
    async def status():
        """Readiness, including the storage backend"""
        repository = get_repository()
        db_manager = get_database_manager()
        db_ok = await db_manager.check_health() if db_manager is not None else None
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "uptime_seconds": int(time.time() - _start_time),
            "storage": repository.source if repository is not None else None,
            "db_connected": db_ok,
            "environment": settings.environment,
        }

    @app.api_route("/ping", methods=["GET", "HEAD"], response_class=PlainTextResponse)
    async def ping():
        return "pong"

    logger.info("FastAPI application configured")
    return app
