"""
DuckDB cache store.

Cached bundles live in a single ``metrics_cache`` table keyed by product,
metric type and the literal date tokens. Rows are upserted on every write
and never expire; staleness is judged from ``fetched_at`` at read time, so
an expired row doubles as the stale fallback.

DuckDB is synchronous. Calls run in a worker thread so the event loop is
never blocked, and each thread gets its own cursor on the shared database.
"""

import asyncio
import json
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import duckdb
import structlog

from metrics_api.storage.base import CacheEntry, CacheKey, CacheStore, CacheStoreError

logger = structlog.get_logger(__name__)


def _naive_utc(value: datetime) -> datetime:
    """TIMESTAMP columns hold naive UTC instants."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DuckDBCacheStore(CacheStore):
    """
    Table-mode cache store backed by DuckDB.

    Attributes:
        db_path: Path to the database file, or ":memory:"
    """

    native_expiry = False

    def __init__(self, db_path: str = "./data/metrics_cache.duckdb"):
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self._root = duckdb.connect(db_path)
        except duckdb.Error as e:
            logger.error("duckdb_connection_failed", db_path=db_path, error=str(e))
            raise CacheStoreError(f"Failed to connect to DuckDB: {e}") from e

        self._local = threading.local()
        self._initialize_schema()

        logger.info("duckdb_cache_store_initialized", db_path=db_path)

    @contextmanager
    def _get_connection(self):
        """
        Get a thread-local cursor on the shared database.

        Raises:
            CacheStoreError: If the statement fails
        """
        if not hasattr(self._local, "connection"):
            self._local.connection = self._root.cursor()

        try:
            yield self._local.connection
        except duckdb.Error as e:
            logger.warning("duckdb_statement_failed", error=str(e))
            raise CacheStoreError(f"DuckDB cache operation failed: {e}") from e

    def _initialize_schema(self) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS metrics_cache (
                    product VARCHAR NOT NULL,
                    metric_type VARCHAR NOT NULL,
                    date_start VARCHAR NOT NULL,
                    date_end VARCHAR NOT NULL,
                    data JSON NOT NULL,
                    fetched_at TIMESTAMP NOT NULL,
                    PRIMARY KEY (product, metric_type, date_start, date_end)
                )
                """
            )

    def _read(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._get_connection() as conn:
            row = conn.execute(
                """
                SELECT data, fetched_at FROM metrics_cache
                WHERE product = ? AND metric_type = ? AND date_start = ? AND date_end = ?
                """,
                list(key),
            ).fetchone()

        if row is None:
            return None

        data, fetched_at = row
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        try:
            return CacheEntry(payload=json.loads(data), fetched_at=fetched_at)
        except (TypeError, ValueError) as e:
            logger.warning("cache_entry_malformed", key=key.render(), error=str(e))
            return None

    def _write(self, key: CacheKey, entry: CacheEntry) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO metrics_cache
                    (product, metric_type, date_start, date_end, data, fetched_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [*key, json.dumps(entry.payload), _naive_utc(entry.fetched_at)],
            )

    async def read(self, key: CacheKey) -> Optional[CacheEntry]:
        return await asyncio.to_thread(self._read, key)

    async def write(self, key: CacheKey, entry: CacheEntry, ttl_seconds: int) -> None:
        await asyncio.to_thread(self._write, key, entry)

    async def aclose(self) -> None:
        self._root.close()
