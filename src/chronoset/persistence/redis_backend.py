"""
Redis-backed implementations of the store and stream interfaces.

Both wrap a redis-py client created with ``decode_responses=True`` so that
members and stream fields come back as `str`.  Every method is a single
Redis command.
"""

from __future__ import annotations

from typing import Any

import redis

from ..protocols import Score


def connect(url: str, *, socket_timeout: float | None = None) -> "redis.Redis":
    """Open a client for `url`; the timeout bounds each command round trip."""
    return redis.from_url(url, decode_responses=True, socket_timeout=socket_timeout)


def _window(offset: int, count: int | None) -> dict[str, Any]:
    # redis-py wants both start and num or neither
    if count is None:
        return {}
    return {"start": offset, "num": count}


class RedisOrderedStore:
    """Sorted sets living in Redis ZSETs."""

    def __init__(self, client: "redis.Redis"):
        self._client = client

    def zadd(self, key: str, score: int, member: str) -> int:
        return self._client.zadd(key, {member: score})

    def zrange(self, key: str, offset: int = 0, count: int | None = None) -> list[str]:
        if count == 0:
            return []
        stop = -1 if count is None or count < 0 else offset + count - 1
        return self._client.zrange(key, offset, stop)

    def zrangebyscore(
        self,
        key: str,
        min: Score,
        max: Score,
        offset: int = 0,
        count: int | None = None,
    ) -> list[str]:
        return self._client.zrangebyscore(key, min, max, **_window(offset, count))

    def zrevrangebyscore(
        self,
        key: str,
        max: Score,
        min: Score,
        offset: int = 0,
        count: int | None = None,
    ) -> list[str]:
        return self._client.zrevrangebyscore(key, max, min, **_window(offset, count))

    def zcard(self, key: str) -> int:
        return self._client.zcard(key)

    def zremrangebyscore(self, key: str, min: Score, max: Score) -> int:
        return self._client.zremrangebyscore(key, min, max)


class RedisEventStream:
    """Event stream on a Redis stream, optionally capped with MAXLEN ~."""

    def __init__(self, client: "redis.Redis", *, maxlen: int | None = None):
        self._client = client
        self._maxlen = maxlen

    def append(self, key: str, fields: dict[str, str]) -> str:
        if self._maxlen is None:
            return self._client.xadd(key, fields)
        return self._client.xadd(key, fields, maxlen=self._maxlen, approximate=True)

    def read(
        self, key: str, count: int | None = None
    ) -> list[tuple[str, dict[str, str]]]:
        return [
            (entry_id, dict(fields))
            for entry_id, fields in self._client.xrange(key, "-", "+", count=count)
        ]
