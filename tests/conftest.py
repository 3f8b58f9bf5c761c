"""Shared fixtures: an in-memory SQLite handle with a controllable clock."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from chronoset import Chronoset
from chronoset.events import registry
from chronoset.persistence.store import SqlOrderedStore

NS = 1_000_000_000
T0 = 1_700_000_000  # seconds since epoch


class FakeClock:
    """Callable clock returning nanoseconds; advance it by hand."""

    def __init__(self, seconds: int = T0):
        self.ns = seconds * NS

    def __call__(self) -> int:
        return self.ns

    def advance(self, seconds: float = 1) -> None:
        self.ns += int(seconds * NS)


class FlakyStore(SqlOrderedStore):
    """SQL store whose next `fail_zadd` zadd calls raise."""

    fail_zadd = 0

    def zadd(self, key, score, member):
        if self.fail_zadd:
            self.fail_zadd -= 1
            raise ConnectionError(f"zadd refused for {key} @ {score}")
        return super().zadd(key, score, member)


class BrokenStream:
    def append(self, key, fields):
        raise ConnectionError("stream is down")

    def read(self, key, count=None):
        return []


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    yield eng
    eng.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db(engine, clock):
    handle = Chronoset.from_engine(engine, clock=clock)
    handle.store = FlakyStore(engine)
    return handle


@pytest.fixture(autouse=True)
def clean_registry():
    registry.clear()
    yield
    registry.clear()
