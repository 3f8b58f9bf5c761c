"""
chronoset.runtime  ──  the handle every record operation takes first.

    from chronoset import Chronoset, MetadataRecord

    db = Chronoset.from_settings(settings)
    MetadataRecord(db, scope="DEFAULT", start=100, metadata={"k": "v"}).create()

A handle bundles one ordered store, one event stream and a clock.  Nothing
is process-global, so tests and multi-tenant callers can hold several.
"""

from __future__ import annotations

import time
from typing import Callable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .config import Settings
from .persistence.models import Base
from .persistence.store import SqlOrderedStore
from .persistence.stream import SqlEventStream
from .protocols import EventStream, OrderedStore

NS_PER_SECOND = 1_000_000_000


class Chronoset:
    def __init__(
        self,
        store: OrderedStore,
        stream: EventStream,
        *,
        clock: Callable[[], int] = time.time_ns,
        default_limit: int = 100,
    ):
        self.store = store
        self.stream = stream
        self.clock = clock
        self.default_limit = default_limit

    def now_ns(self) -> int:
        """Current time in nanoseconds since epoch."""
        return int(self.clock())

    def now_s(self) -> int:
        """Current time in whole seconds since epoch."""
        return self.now_ns() // NS_PER_SECOND

    # ---------- constructors ----------
    @classmethod
    def from_engine(cls, engine: Engine, **kwargs) -> "Chronoset":
        """SQL store and stream on `engine`; creates the tables if missing."""
        Base.metadata.create_all(engine)
        return cls(SqlOrderedStore(engine), SqlEventStream(engine), **kwargs)

    @classmethod
    def from_redis(cls, client, *, stream_maxlen: int | None = None, **kwargs) -> "Chronoset":
        from .persistence.redis_backend import RedisEventStream, RedisOrderedStore

        return cls(
            RedisOrderedStore(client),
            RedisEventStream(client, maxlen=stream_maxlen),
            **kwargs,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Chronoset":
        if settings.backend == "redis":
            from .persistence.redis_backend import connect

            client = connect(settings.redis_url, socket_timeout=settings.socket_timeout)
            return cls.from_redis(
                client,
                stream_maxlen=settings.stream_maxlen,
                default_limit=settings.default_limit,
            )

        engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            future=True,
            **_pool_options(settings),
        )
        return cls.from_engine(engine, default_limit=settings.default_limit)


def _pool_options(settings: Settings) -> dict:
    # SQLite URLs get a SingletonThreadPool/StaticPool that rejects pool_timeout
    if settings.database_url.startswith("sqlite"):
        return {}
    return {"pool_timeout": settings.pool_timeout}
