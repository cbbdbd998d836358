"""
Key-value cache abstraction.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class CacheConnectionError(ConnectionError):
    """Raised when the cache server is unreachable."""


class CacheClient(Protocol):
    """Minimal cache interface: liveness plus get/set/delete with expiry."""

    def connect(self) -> bool:
        ...

    def is_alive(self) -> bool:
        ...

    def set(self, key: str, value: str, expiry_seconds: int) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        ...

    def delete(self, key: str) -> None:
        ...

    def expire(self, key: str, seconds: int) -> None:
        ...

    def close(self) -> None:
        ...


@dataclass
class InMemoryCacheClient:
    """Dict-backed cache with per-key expiry for testing/dev."""

    alive: bool = True
    # key -> (value, expires_at on the monotonic clock)
    items: dict[str, tuple[str, float]] = field(default_factory=dict)

    def connect(self) -> bool:
        self.alive = True
        return True

    def is_alive(self) -> bool:
        return self.alive

    def set(self, key: str, value: str, expiry_seconds: int) -> None:
        self.items[key] = (str(value), time.monotonic() + expiry_seconds)

    def get(self, key: str) -> Optional[str]:
        entry = self.items.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self.items[key]
            return None
        return value

    def delete(self, key: str) -> None:
        self.items.pop(key, None)

    def expire(self, key: str, seconds: int) -> None:
        if self.get(key) is not None:
            value, _ = self.items[key]
            self.items[key] = (value, time.monotonic() + seconds)

    def close(self) -> None:
        self.alive = False


@dataclass
class RedisCacheClient:
    """Redis-backed cache. Without a URL the redis-py defaults are used."""

    url: Optional[str] = None

    def __post_init__(self):
        if self.url:
            self.client = redis.Redis.from_url(self.url, decode_responses=True)
        else:
            self.client = redis.Redis(decode_responses=True)
        self._connected = False

    def connect(self) -> bool:
        try:
            self.client.ping()
        except redis_exceptions.RedisError as exc:
            logger.warning("Redis client error: %s", exc)
            self._connected = False
        else:
            self._connected = True
        return self._connected

    def is_alive(self) -> bool:
        return self._connected

    def _call(self, method: str, *args):
        """Run a redis command; success marks the client alive, a lost connection marks it down."""
        try:
            result = getattr(self.client, method)(*args)
        except (redis_exceptions.ConnectionError, redis_exceptions.TimeoutError) as exc:
            logger.warning("Redis client error: %s", exc)
            self._connected = False
            raise CacheConnectionError(str(exc)) from exc
        self._connected = True
        return result

    def set(self, key: str, value: str, expiry_seconds: int) -> None:
        self._call("setex", key, expiry_seconds, value)

    def get(self, key: str) -> Optional[str]:
        return self._call("get", key)

    def delete(self, key: str) -> None:
        self._call("delete", key)

    def expire(self, key: str, seconds: int) -> None:
        self._call("expire", key, seconds)

    def close(self) -> None:
        self.client.close()
        self._connected = False
