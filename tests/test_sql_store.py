"""
Tests for the SQL sorted-set emulation.

Covers:
- ordering and score-window queries with limits
- infinite bounds
- member uniqueness in zadd
- removal counts
"""

import pytest
from sqlalchemy.orm import Session

from chronoset.persistence.models import Base, StreamEntryRow
from chronoset.persistence.store import SqlOrderedStore
from chronoset.persistence.stream import SqlEventStream


@pytest.fixture
def store(engine):
    Base.metadata.create_all(engine)
    s = SqlOrderedStore(engine)
    for score in (30, 10, 20):
        s.zadd("k", score, f"m{score}")
    s.zadd("other", 15, "x")
    return s


class TestReads:
    def test_zrange_is_ascending(self, store):
        assert store.zrange("k") == ["m10", "m20", "m30"]

    def test_zrange_window(self, store):
        assert store.zrange("k", 1, 1) == ["m20"]
        assert store.zrange("k", 0, 0) == []

    def test_zrangebyscore_inclusive(self, store):
        assert store.zrangebyscore("k", 10, 20) == ["m10", "m20"]
        assert store.zrangebyscore("k", 11, 19) == []

    def test_zrangebyscore_limit(self, store):
        assert store.zrangebyscore("k", "-inf", "+inf", 0, 2) == ["m10", "m20"]

    def test_zrevrangebyscore(self, store):
        assert store.zrevrangebyscore("k", 25, "-inf") == ["m20", "m10"]
        assert store.zrevrangebyscore("k", 25, "-inf", 0, 1) == ["m20"]
        assert store.zrevrangebyscore("k", 5, "-inf") == []

    def test_zcard_is_per_key(self, store):
        assert store.zcard("k") == 3
        assert store.zcard("other") == 1
        assert store.zcard("missing") == 0


class TestWrites:
    def test_zadd_same_member_moves_it(self, store):
        assert store.zadd("k", 40, "m10") == 0
        assert store.zrange("k") == ["m20", "m30", "m10"]
        assert store.zcard("k") == 3

    def test_zadd_new_member(self, store):
        assert store.zadd("k", 40, "m40") == 1

    def test_zremrangebyscore_counts(self, store):
        assert store.zremrangebyscore("k", 10, 20) == 2
        assert store.zrange("k") == ["m30"]
        assert store.zremrangebyscore("k", 10, 20) == 0
        assert store.zcard("other") == 1

    def test_zremrangebyscore_unbounded(self, store):
        assert store.zremrangebyscore("k", "-inf", "+inf") == 3


class TestSqlEventStream:
    def test_append_and_read_in_order(self, engine):
        Base.metadata.create_all(engine)
        stream = SqlEventStream(engine)
        first = stream.append("S__CALENDAR", {"kind": "created"})
        second = stream.append("S__CALENDAR", {"kind": "deleted"})
        stream.append("T__CALENDAR", {"kind": "created"})

        entries = stream.read("S__CALENDAR")
        assert entries == [(first, {"kind": "created"}), (second, {"kind": "deleted"})]
        assert stream.read("S__CALENDAR", count=1) == [(first, {"kind": "created"})]

    def test_rows_carry_timestamps(self, engine):
        Base.metadata.create_all(engine)
        SqlEventStream(engine).append("S__CALENDAR", {"kind": "created"})
        with Session(engine) as s:
            row = s.query(StreamEntryRow).one()
            assert row.created_ts is not None
