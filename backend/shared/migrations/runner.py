"""SQL migration runner for the Postgres document store."""

from __future__ import annotations

import logging
from pathlib import Path

import asyncpg

logger = logging.getLogger(__name__)

VERSIONS_DIR = Path(__file__).resolve().parent / "versions"


class MigrationRunner:
    """Apply ``versions/NNN_name.sql`` files once each, in filename order.

    Applied versions are recorded in ``schema_migrations``.
    """

    TRACKING_TABLE = "schema_migrations"

    def __init__(self, pool: asyncpg.Pool, versions_dir: Path | None = None) -> None:
        self.pool = pool
        self.versions_dir = versions_dir or VERSIONS_DIR

    async def applied_versions(self) -> set[str]:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.TRACKING_TABLE} (
                    version    TEXT PRIMARY KEY,
                    applied_at TIMESTAMPTZ DEFAULT NOW()
                )
                """
            )
            rows = await conn.fetch(f"SELECT version FROM {self.TRACKING_TABLE}")  # noqa: S608
        return {row["version"] for row in rows}

    async def run_pending(self) -> list[str]:
        """Apply every migration not yet recorded; return the new versions."""
        applied = await self.applied_versions()
        pending = [p for p in sorted(self.versions_dir.glob("*.sql")) if p.stem not in applied]

        for sql_path in pending:
            logger.info(f"Applying migration: {sql_path.stem}")
            sql = sql_path.read_text(encoding="utf-8")
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(sql)
                    await conn.execute(
                        f"INSERT INTO {self.TRACKING_TABLE} (version) VALUES ($1)",  # noqa: S608
                        sql_path.stem,
                    )

        if pending:
            logger.info(f"Applied {len(pending)} migration(s)")
        else:
            logger.debug("Database schema is up to date")
        return [p.stem for p in pending]
