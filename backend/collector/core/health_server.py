"""HTTP health check server"""

import logging
import time
from typing import TYPE_CHECKING

from aiohttp import web

if TYPE_CHECKING:
    from .collector import DataCollector

logger = logging.getLogger(__name__)

SERVICE_NAME = "lobbywatch-collector"


class HealthCheckServer:
    """Liveness and status endpoints for the collector process."""

    def __init__(
        self, collector: "DataCollector | None" = None, host: str = "0.0.0.0", port: int = 8080
    ) -> None:
        self.collector = collector
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/", self.handle_root)
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.app.router.add_get("/ping", self.handle_ping)

    async def handle_root(self, request: web.Request) -> web.Response:
        return web.json_response({"service": SERVICE_NAME, "status": "running"})

    async def handle_health(self, request: web.Request) -> web.Response:
        """Always 200; ``ready`` turns true after the first completed cycle"""
        ready = self.collector is not None and self.collector.cycles > 0
        return web.json_response({"status": "healthy" if ready else "starting", "ready": ready})

    async def handle_status(self, request: web.Request) -> web.Response:
        status = self.collector.status() if self.collector is not None else {}
        return web.json_response(
            {
                "service": SERVICE_NAME,
                "uptime_seconds": int(time.time() - self._start_time),
                **status,
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        return web.Response(text="pong")

    async def start(self) -> None:
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Health server started on {self.host}:{self.port}")
        logger.info(f"  GET http://{self.host}:{self.port}/status - Collector status")

    async def stop(self) -> None:
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Health server stopped")
