"""Document stores: whole-document ``load(key)`` / ``save(key, document)``.

Every persisted collection is one JSON-compatible document.  Stores rewrite
the full document on each save; there is no partial update.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

import asyncpg

logger = logging.getLogger(__name__)

Document = dict[str, Any] | list[Any]


class DocumentStoreError(Exception):
    """Raised when a document cannot be read from or written to the store."""


class DocumentDecodeError(DocumentStoreError):
    """The document was read but its content is not valid JSON or has the wrong shape."""


class DocumentStore(Protocol):
    @property
    def source(self) -> str: ...

    async def load(self, key: str) -> Document | None: ...

    async def save(self, key: str, document: Document) -> None: ...


class JsonFileDocumentStore:
    """One pretty-printed ``<key>.json`` file per document."""

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    @property
    def source(self) -> str:
        return str(self.data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> Document | None:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, key: str, document: Document) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)

    async def load(self, key: str) -> Document | None:
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as e:
            raise DocumentStoreError(f"Failed to read {self._path(key)}: {e}") from e
        except ValueError as e:
            raise DocumentDecodeError(f"{self._path(key)} is not valid JSON: {e}") from e

    async def save(self, key: str, document: Document) -> None:
        try:
            await asyncio.to_thread(self._write, key, document)
        except (OSError, TypeError, ValueError) as e:
            raise DocumentStoreError(f"Failed to write {self._path(key)}: {e}") from e


class PostgresDocumentStore:
    """Documents kept as JSONB rows in the ``documents`` table."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    @property
    def source(self) -> str:
        return "postgres"

    async def load(self, key: str) -> Document | None:
        try:
            async with self.pool.acquire() as conn:
                body = await conn.fetchval("SELECT body FROM documents WHERE key = $1", key)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise DocumentStoreError(f"Failed to load document {key}: {e}") from e

        if body is None:
            return None
        try:
            return json.loads(body)
        except ValueError as e:
            raise DocumentDecodeError(f"Document {key} is not valid JSON: {e}") from e

    async def save(self, key: str, document: Document) -> None:
        try:
            payload = json.dumps(document, ensure_ascii=False)
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO documents (key, body)
                    VALUES ($1, $2::jsonb)
                    ON CONFLICT (key) DO UPDATE SET
                        body       = EXCLUDED.body,
                        updated_at = NOW()
                    """,
                    key,
                    payload,
                )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, TypeError, ValueError) as e:
            raise DocumentStoreError(f"Failed to save document {key}: {e}") from e
