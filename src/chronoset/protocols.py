"""
Interfaces of the two external collaborators: the ordered store and the
event stream.  Both mirror the Redis commands they were modelled on, so the
Redis implementations are one call per method and the SQL ones emulate them.
"""

from __future__ import annotations

from typing import Protocol, Union

Score = Union[int, float, str]  # "-inf" / "+inf" are accepted as bounds


class OrderedStore(Protocol):
    """Score-ordered collection of string members, addressed by key."""

    def zadd(self, key: str, score: int, member: str) -> int: ...

    def zrange(
        self, key: str, offset: int = 0, count: int | None = None
    ) -> list[str]: ...

    def zrangebyscore(
        self,
        key: str,
        min: Score,
        max: Score,
        offset: int = 0,
        count: int | None = None,
    ) -> list[str]: ...

    def zrevrangebyscore(
        self,
        key: str,
        max: Score,
        min: Score,
        offset: int = 0,
        count: int | None = None,
    ) -> list[str]: ...

    def zcard(self, key: str) -> int: ...

    def zremrangebyscore(self, key: str, min: Score, max: Score) -> int: ...


class EventStream(Protocol):
    """Append-only log of string-field entries, addressed by key."""

    def append(self, key: str, fields: dict[str, str]) -> str: ...

    def read(
        self, key: str, count: int | None = None
    ) -> list[tuple[str, dict[str, str]]]: ...
