# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Redis caching layer with TTL support, plus an in-process fallback."""

from __future__ import annotations

import json
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID

import redis.asyncio as redis
from attrs import field, frozen
from beartype import beartype

from .config import Settings
from .logging_utils import get_logger

__all__ = [
    "Cache",
    "CacheConfig",
    "CacheKeys",
    "MemoryCache",
    "RedisType",
    "build_cache",
]

if TYPE_CHECKING:
    from redis.asyncio import Redis as RedisType
else:
    RedisType = redis.Redis

logger = get_logger(__name__)


@frozen
class CacheConfig:
    """Immutable cache configuration."""

    url: str = field()
    default_ttl: int = field(default=3600)  # 1 hour
    max_connections: int = field(default=10)
    decode_responses: bool = field(default=True)


class CacheKeys:
    """Key builders, kept in one place so invalidation matches population."""

    @staticmethod
    def policy(policy_id: UUID | str) -> str:
        return f"policy:{policy_id}"


class Cache:
    """Redis cache manager with async support.

    The constructor optionally accepts an already-created
    ``redis.asyncio.Redis`` instance (tests pass a fakeredis client); in that
    case :meth:`connect` is a no-op.
    """

    def __init__(self, config: CacheConfig, redis_client: RedisType | None = None) -> None:
        """Create a cache wrapper."""
        self._config = config
        self._redis: RedisType | None = redis_client

    @beartype
    async def connect(self) -> None:
        """Create Redis connection pool."""
        if self._redis is not None:
            return

        self._redis = redis.from_url(
            self._config.url,
            max_connections=self._config.max_connections,
            decode_responses=self._config.decode_responses,
        )
        logger.info("Redis cache connected")

    @beartype
    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis is None:
            return

        await self._redis.aclose()
        self._redis = None

    @beartype
    async def get(self, key: str) -> Any | None:
        """Get value from cache."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        value = await self._redis.get(key)
        if value is None:
            return None

        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    @beartype
    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | timedelta | None = None,
    ) -> bool:
        """Set value in cache with optional TTL."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        if ttl is None:
            ttl = self._config.default_ttl

        if isinstance(ttl, int):
            ttl = timedelta(seconds=ttl)

        result = await self._redis.setex(key, ttl, json.dumps(value, default=str))
        return bool(result)

    @beartype
    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        if self._redis is None:
            raise RuntimeError("Cache not connected")

        result = await self._redis.delete(key)
        return bool(result > 0)

    @beartype
    async def health_check(self) -> bool:
        """Ping Redis."""
        if self._redis is None:
            return False
        try:
            await self._redis.ping()
        except (redis.RedisError, OSError):
            logger.exception("Redis health check failed")
            return False
        return True


class MemoryCache:
    """In-process cache with the same interface as :class:`Cache`."""

    def __init__(self, default_ttl: int = 300) -> None:
        """Initialize an empty cache."""
        self._default_ttl = default_ttl
        self._entries: dict[str, tuple[float, str]] = {}

    async def connect(self) -> None:
        """Nothing to connect."""

    async def disconnect(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    @beartype
    async def get(self, key: str) -> Any | None:
        """Get value from cache, honouring expiry."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return None
        return json.loads(payload)

    @beartype
    async def set(self, key: str, value: Any, ttl: int | timedelta | None = None) -> bool:
        """Set value in cache."""
        if ttl is None:
            ttl = self._default_ttl
        seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
        self._entries[key] = (time.monotonic() + seconds, json.dumps(value, default=str))
        return True

    @beartype
    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        return self._entries.pop(key, None) is not None

    async def health_check(self) -> bool:
        """Always healthy."""
        return True


@beartype
def build_cache(settings: Settings) -> Cache | MemoryCache:
    """Pick the cache backend named by ``redis_url``."""
    if settings.uses_memory_cache:
        return MemoryCache(default_ttl=settings.redis_ttl_seconds)
    return Cache(CacheConfig(url=settings.redis_url, default_ttl=settings.redis_ttl_seconds))
