"""Cache service with Protocol pattern for dependency injection.

Provides RedisCacheService (shared cache) and LocalCacheService (per-process
TTL map used when Redis is not configured or unreachable).
"""

import json
import logging
import threading
import time
from typing import Protocol

import redis

logger = logging.getLogger(__name__)


class CacheService(Protocol):
    """Cache service interface."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str, ttl: int) -> None: ...
    def get_json(self, key: str) -> dict | None: ...
    def set_json(self, key: str, data: dict, ttl: int) -> None: ...


class _JsonMixin:
    def get_json(self, key: str) -> dict | None:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return None

    def set_json(self, key: str, data: dict, ttl: int) -> None:
        self.set(key, json.dumps(data, ensure_ascii=False), ttl)


class RedisCacheService(_JsonMixin):
    """Redis-backed cache implementation."""

    def __init__(self, redis_url: str) -> None:
        self._client = redis.from_url(redis_url, decode_responses=True)
        self._client.ping()

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except redis.RedisError:
            logger.warning("Redis GET failed for %s", key, exc_info=True)
            return None

    def set(self, key: str, value: str, ttl: int) -> None:
        try:
            self._client.setex(key, ttl, value)
        except redis.RedisError:
            logger.warning("Redis SETEX failed for %s", key, exc_info=True)


class LocalCacheService(_JsonMixin):
    """In-process cache with per-entry expiry and a size cap."""

    def __init__(self, max_entries: int = 512, clock=time.monotonic) -> None:
        self._entries: dict[str, tuple[float, str]] = {}
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_entries:
                # Drop the entry closest to expiry.
                oldest = min(self._entries, key=lambda k: self._entries[k][0])
                del self._entries[oldest]
            self._entries[key] = (self._clock() + ttl, value)


def create_cache_service(redis_url: str) -> CacheService:
    """Factory: Redis when configured and reachable, local cache otherwise."""
    if not redis_url:
        return LocalCacheService()
    try:
        return RedisCacheService(redis_url)
    except (redis.RedisError, ValueError):
        logger.warning("Redis unreachable at startup, using local cache", exc_info=True)
        return LocalCacheService()
