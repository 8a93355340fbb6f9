"""
Time-limited cache over a StorageBackend.

Entries are stored as `{"data": <payload>, "timestamp": <epoch ms>}` and read
back only while younger than the cache's TTL. One blob per key; writes
overwrite, never merge.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable

from fitsync.domains.errors import ParseError
from fitsync.infrastructure.storage.backends import StorageBackend
from fitsync.utils.logger import get_logger

logger = get_logger("fitsync.cache")

DAY_MS = 24 * 60 * 60 * 1000


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CacheEnvelope:
    payload: Any
    written_at: float  # epoch milliseconds

    def dumps(self) -> str:
        return json.dumps({"data": self.payload, "timestamp": self.written_at}, ensure_ascii=False)

    @classmethod
    def loads(cls, raw: str) -> "CacheEnvelope":
        try:
            obj = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ParseError(f"invalid cache JSON: {e}") from e
        if not isinstance(obj, dict) or "data" not in obj or "timestamp" not in obj:
            raise ParseError("cache envelope missing data/timestamp")
        ts = obj["timestamp"]
        if isinstance(ts, bool) or not isinstance(ts, (int, float)):
            raise ParseError(f"cache timestamp is not a number: {ts!r}")
        return cls(payload=obj["data"], written_at=float(ts))


class TTLCache:
    """
    Freshness policy over a StorageBackend.

    Args:
        storage: Backing store.
        ttl_ms: Maximum age in milliseconds. An entry aged exactly ttl_ms is stale.
        clock: Returns the current epoch time in milliseconds.
    """

    def __init__(
        self,
        storage: StorageBackend,
        ttl_ms: float,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._storage = storage
        self._ttl_ms = ttl_ms
        self._clock = clock or _now_ms

    @classmethod
    def days(cls, storage: StorageBackend, days: int, clock: Callable[[], float] | None = None) -> "TTLCache":
        return cls(storage, days * DAY_MS, clock=clock)

    @property
    def ttl_ms(self) -> float:
        return self._ttl_ms

    async def read(self, key: str) -> Any | None:
        """Return the cached payload, or None on miss, stale or corrupt entry."""
        raw = await self._storage.get(key)
        if raw is None:
            logger.debug("Cache miss: %s", key)
            return None
        try:
            envelope = CacheEnvelope.loads(raw)
        except ParseError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None
        age = self._clock() - envelope.written_at
        if age >= self._ttl_ms:
            logger.info("Cache stale: %s (age %.0f ms)", key, age)
            return None
        logger.info("Cache hit: %s", key)
        return envelope.payload

    async def write(self, key: str, payload: Any) -> None:
        envelope = CacheEnvelope(payload=payload, written_at=self._clock())
        try:
            raw = envelope.dumps()
        except (TypeError, ValueError) as e:
            logger.warning("Cache write skipped for %s, payload not serializable: %s", key, e)
            return
        await self._storage.set(key, raw)

    async def invalidate(self, key: str) -> None:
        await self._storage.delete(key)
