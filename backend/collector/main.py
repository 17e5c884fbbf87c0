"""Collector service entry point: poll loop, signal handling, final flush."""

import asyncio
import logging
import signal

import asyncpg
import httpx

from shared.database import DatabaseManager, PoolConfig
from shared.migrations.runner import MigrationRunner
from shared.repositories import (
    HistoryRepository,
    JsonFileDocumentStore,
    PostgresDocumentStore,
)

from .core.collector import DataCollector
from .core.config import CollectorSettings, get_settings
from .core.health_server import HealthCheckServer
from .core.logging import setup_logging
from .sinks import EventSink, LoggingEventSink, WebhookEventSink, dispatch
from .sources import GameSource, build_sources, fetch_all

logger = logging.getLogger(__name__)


async def build_repository(
    settings: CollectorSettings,
) -> tuple[HistoryRepository | None, DatabaseManager | None]:
    """Open the configured history store.

    An unreachable Postgres yields ``(None, None)`` and the collector runs
    in memory only.
    """
    if settings.storage_backend == "postgres":
        db = DatabaseManager(settings.database_url, PoolConfig.for_service("collector"))
        try:
            await db.connect()
            await MigrationRunner(db.pool).run_pending()
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            logger.error(f"History store unavailable, running in memory only: {e}")
            await db.disconnect()
            return None, None
        return HistoryRepository(PostgresDocumentStore(db.pool)), db
    return HistoryRepository(JsonFileDocumentStore(settings.data_dir)), None


async def poll_loop(
    collector: DataCollector,
    sources: list[GameSource],
    sinks: list[EventSink],
    settings: CollectorSettings,
    stop: asyncio.Event,
) -> None:
    loop = asyncio.get_running_loop()
    while not stop.is_set():
        started = loop.time()

        payloads = await fetch_all(sources, settings.fetch_timeout)
        result = await collector.run_cycle(payloads)
        if result.events:
            await dispatch(result.events, sinks)

        remaining = settings.poll_interval - (loop.time() - started)
        if remaining <= 0:
            logger.warning(f"Cycle took longer than poll interval ({settings.poll_interval}s)")
            continue
        try:
            await asyncio.wait_for(stop.wait(), timeout=remaining)
        except TimeoutError:
            pass


async def run_collector(
    collector: DataCollector,
    sources: list[GameSource],
    sinks: list[EventSink],
    settings: CollectorSettings,
    stop: asyncio.Event,
) -> None:
    """Poll until ``stop`` is set, then flush history once."""
    try:
        await poll_loop(collector, sources, sinks, settings, stop)
    finally:
        logger.info("Shutting down collector...")
        await collector.teardown()


async def run() -> None:
    settings = get_settings()
    setup_logging(settings)

    games = settings.game_list
    logger.info(f"Starting collector for games: {', '.join(games)}")
    missing = [g for g in games if g not in settings.game_sources]
    if missing:
        logger.warning(f"No source configured for: {', '.join(missing)}")

    repository, db = await build_repository(settings)
    collector = DataCollector(
        repository,
        games=games,
        snapshot_cap=settings.snapshot_cap,
        session_cap=settings.session_cap,
        activity_cap=settings.activity_cap,
        session_min_minutes=settings.session_min_minutes,
        notification_cooldown=settings.cooldown,
        tz=settings.tzinfo,
    )
    await collector.load()

    http = httpx.AsyncClient(timeout=settings.fetch_timeout)
    sources: list[GameSource] = list(build_sources(settings.game_sources, http))
    sinks: list[EventSink] = [LoggingEventSink()]
    if settings.notification_webhook_url:
        sinks.append(WebhookEventSink(settings.notification_webhook_url, http))

    health = HealthCheckServer(collector, host=settings.health_host, port=settings.health_port)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        await health.start()
        await run_collector(collector, sources, sinks, settings, stop)
    finally:
        await health.stop()
        await http.aclose()
        if db is not None:
            await db.disconnect()
        logger.info("Collector stopped")


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
