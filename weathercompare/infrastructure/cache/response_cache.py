"""
Response Cache - TTL-keyed store for normalized provider responses.

Keys are "<prefix>:<location key>:<source>", so different sources for
the same location never collide. Expiry is lazy: entries are checked on
read and evicted then; nothing sweeps proactively. Concurrent misses for
the same key may trigger duplicate upstream fetches (no coalescing).

Backends:
- ResponseCache: in-process dict (default)
- RedisResponseCache: redis.asyncio with SETEX, JSON payloads validated
  back into a pydantic model on read
"""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger
from pydantic import BaseModel
from redis.asyncio import Redis

from ...api.middleware.prometheus_metrics import CACHE_LOOKUPS

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    key: str
    timestamp: float
    ttl: float
    payload: T

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp >= self.ttl

    def expires_at(self) -> float:
        return self.timestamp + self.ttl


class ResponseCache(Generic[T]):
    """In-memory TTL cache with lazy eviction."""

    def __init__(
        self,
        prefix: str = "weather",
        default_ttl: float = 15 * 60,
        source_ttls: dict[str, float] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.source_ttls = dict(source_ttls or {})
        self.clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def make_key(self, location_key: str, source: str) -> str:
        return f"{self.prefix}:{location_key}:{source}"

    def ttl_for(self, source: str) -> float:
        return self.source_ttls.get(source, self.default_ttl)

    def _record(self, hit: bool) -> None:
        CACHE_LOOKUPS.labels(
            cache=self.prefix, result="hit" if hit else "miss"
        ).inc()

    async def get(
        self, location_key: str, source: str
    ) -> CacheEntry[T] | None:
        key = self.make_key(location_key, source)
        entry = self._entries.get(key)
        if entry is None:
            self._record(hit=False)
            return None
        if entry.is_expired(self.clock()):
            del self._entries[key]
            logger.debug(f"Cache EXPIRED: {key}")
            self._record(hit=False)
            return None
        logger.debug(f"Cache HIT: {key}")
        self._record(hit=True)
        return entry

    async def set(
        self,
        location_key: str,
        source: str,
        payload: T,
        ttl: float | None = None,
    ) -> CacheEntry[T]:
        key = self.make_key(location_key, source)
        entry = CacheEntry(
            key=key,
            timestamp=self.clock(),
            ttl=ttl if ttl is not None else self.ttl_for(source),
            payload=payload,
        )
        self._entries[key] = entry
        logger.debug(f"Cache SAVE: {key} (TTL: {entry.ttl:.0f}s)")
        return entry

    async def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def invalidate_location(self, location_key: str) -> int:
        prefix = f"{self.prefix}:{location_key}:"
        keys = [k for k in self._entries if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def invalidate_all(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Cache '{self.prefix}' cleared ({count} entries)")
        return count

    def __len__(self) -> int:
        return len(self._entries)

    async def close(self) -> None:
        return None


class RedisResponseCache(ResponseCache[T]):
    """
    Redis-backed variant.

    Entries are stored as JSON {"timestamp", "ttl", "payload"} with SETEX
    so Redis drops them on its own; the timestamp check on read keeps the
    lazy-expiry contract even when the Redis TTL and clock disagree.
    """

    def __init__(
        self,
        redis: Redis,
        model: type[BaseModel],
        prefix: str = "weather",
        default_ttl: float = 15 * 60,
        source_ttls: dict[str, float] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(prefix, default_ttl, source_ttls, clock)
        self.redis = redis
        self.model = model

    @classmethod
    def from_url(cls, redis_url: str, model: type[BaseModel], **kwargs):
        return cls(Redis.from_url(redis_url), model, **kwargs)

    async def get(
        self, location_key: str, source: str
    ) -> CacheEntry[T] | None:
        key = self.make_key(location_key, source)
        raw = await self.redis.get(key)
        if raw is None:
            self._record(hit=False)
            return None
        try:
            document: dict[str, Any] = json.loads(raw)
            entry = CacheEntry(
                key=key,
                timestamp=float(document["timestamp"]),
                ttl=float(document["ttl"]),
                payload=self.model.model_validate(document["payload"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Cache parse error for {key}: {e}")
            await self.redis.delete(key)
            self._record(hit=False)
            return None
        if entry.is_expired(self.clock()):
            await self.redis.delete(key)
            self._record(hit=False)
            return None
        self._record(hit=True)
        return entry

    async def set(
        self,
        location_key: str,
        source: str,
        payload: T,
        ttl: float | None = None,
    ) -> CacheEntry[T]:
        key = self.make_key(location_key, source)
        entry = CacheEntry(
            key=key,
            timestamp=self.clock(),
            ttl=ttl if ttl is not None else self.ttl_for(source),
            payload=payload,
        )
        document = {
            "timestamp": entry.timestamp,
            "ttl": entry.ttl,
            "payload": payload.model_dump(mode="json"),
        }
        await self.redis.setex(
            key, max(int(entry.ttl), 1), json.dumps(document)
        )
        logger.debug(f"Cache SAVE (redis): {key} (TTL: {entry.ttl:.0f}s)")
        return entry

    async def invalidate(self, key: str) -> bool:
        return bool(await self.redis.delete(key))

    async def _delete_matching(self, pattern: str) -> int:
        keys = [key async for key in self.redis.scan_iter(match=pattern)]
        if not keys:
            return 0
        return int(await self.redis.delete(*keys))

    async def invalidate_location(self, location_key: str) -> int:
        return await self._delete_matching(f"{self.prefix}:{location_key}:*")

    async def invalidate_all(self) -> int:
        count = await self._delete_matching(f"{self.prefix}:*")
        logger.info(f"Redis cache '{self.prefix}' cleared ({count} keys)")
        return count

    async def close(self) -> None:
        await self.redis.aclose()
