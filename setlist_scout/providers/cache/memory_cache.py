"""In-memory cache provider using cachetools.TTLCache.

Holds identity-graph lookups for the life of the process.  Suitable for a
single-process deployment; swap in another ICacheProvider for anything
shared between workers.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import TTLCache

from setlist_scout.interfaces.cache_provider import ICacheProvider
from setlist_scout.utils.logging import get_logger


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds applied to every entry.
    """

    def __init__(self, max_size: int = 1000, ttl: int = 86400) -> None:
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def get(self, key: str) -> Any | None:
        value = self._cache.get(key)
        self._logger.debug("cache_hit" if value is not None else "cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        ``TTLCache`` applies the uniform TTL given at construction; the
        per-call *ttl* is accepted for interface compatibility only.
        """
        self._cache[key] = value
        self._logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
