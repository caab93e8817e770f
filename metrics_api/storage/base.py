"""
Abstract cache store interface.

A cache store persists one entry per key: the serialized bundle payload and
the instant it was fetched. Entries are never updated in place; a write
replaces the whole entry.

Stores differ in how they expire entries:

- Native expiry (Redis with ``EX``, in-memory in native mode): an expired
  key is simply absent, so any entry a read returns is fresh.
- Table mode (DuckDB, Redis with a stale-retention window, in-memory in
  table mode): entries outlive the TTL and the cache compares
  ``fetched_at`` against the TTL at read time. Expired entries remain
  readable as stale fallbacks.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, NamedTuple, Optional

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

logger = structlog.get_logger(__name__)

KEY_PREFIX = "metrics"


class CacheStoreError(Exception):
    """The cache backend is unreachable or failed an operation."""

    pass


class CacheKey(NamedTuple):
    """
    Identity of one cached bundle.

    Dates are the literal request tokens ("30daysAgo", "today"), not the
    resolved instants, so a relative range maps to the same key all day.
    """

    product: str
    metric_type: str
    date_start: str
    date_end: str

    def render(self) -> str:
        return ":".join([KEY_PREFIX, self.product, self.metric_type, self.date_start, self.date_end])


class CacheEntry(BaseModel):
    """Stored value: bundle payload plus the instant it was fetched."""

    model_config = ConfigDict(frozen=True)

    payload: Any
    fetched_at: datetime

    def to_json(self) -> str:
        return json.dumps({"payload": self.payload, "fetchedAt": self.fetched_at.isoformat()})

    @classmethod
    def from_json(cls, raw: Any, key: str) -> Optional["CacheEntry"]:
        """
        Parse a serialized entry.

        Returns:
            The entry, or None if the stored value is malformed
        """
        try:
            data = json.loads(raw)
            return cls(payload=data["payload"], fetched_at=data["fetchedAt"])
        except (TypeError, ValueError, KeyError, ValidationError) as e:
            logger.warning("cache_entry_malformed", key=key, error=str(e))
            return None


class CacheStore(ABC):
    """
    Abstract base class for cache backends.

    Implementations raise CacheStoreError when the backend cannot be
    reached. A stored value that cannot be parsed is reported as absent.

    Attributes:
        native_expiry: True if expired entries disappear on their own
    """

    native_expiry: bool = False

    @abstractmethod
    async def read(self, key: CacheKey) -> Optional[CacheEntry]:
        """
        Read the entry for ``key``.

        Raises:
            CacheStoreError: If the backend fails
        """
        pass

    @abstractmethod
    async def write(self, key: CacheKey, entry: CacheEntry, ttl_seconds: int) -> None:
        """
        Insert or replace the entry for ``key``.

        Args:
            ttl_seconds: Freshness window; native-expiry stores use it as
                the key expiry

        Raises:
            CacheStoreError: If the backend fails
        """
        pass

    async def aclose(self) -> None:
        """Release backend resources."""
        pass
