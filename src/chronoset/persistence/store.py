"""
Thin data-access layer around the `sorted_entries` table.

Emulates the Redis sorted-set commands chronoset needs; each method runs in
its own short-lived Session and commits once, so every call is atomic on its
own and nothing spans calls.
"""

from __future__ import annotations

import math
from typing import Iterable

from sqlalchemy import Select, delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ..protocols import Score
from .models import SortedEntryRow


def _bound(score: Score) -> int | float | None:
    """Parse a score bound; infinite bounds become `None` (unbounded)."""
    if isinstance(score, int):
        return score
    value = float(score)
    if math.isinf(value):
        return None
    return value


def _limit(q: Select, offset: int, count: int | None) -> Select:
    if offset:
        q = q.offset(offset)
    if count is not None and count >= 0:
        q = q.limit(count)
    return q


class SqlOrderedStore:
    """Sorted sets stored as rows of (key, score, member)."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _new_session(self) -> Session:
        return Session(bind=self.engine, future=True)

    @staticmethod
    def _score_filter(key: str, min: Score, max: Score) -> list:
        clauses = [SortedEntryRow.key == key]
        lo, hi = _bound(min), _bound(max)
        if lo is not None:
            clauses.append(SortedEntryRow.score >= lo)
        if hi is not None:
            clauses.append(SortedEntryRow.score <= hi)
        return clauses

    @staticmethod
    def _members(rows: Iterable) -> list[str]:
        return [member for (member,) in rows]

    # ---- writes ---------------------------------------------------------
    def zadd(self, key: str, score: int, member: str) -> int:
        """Insert `member` at `score`; an identical member is moved, not duplicated.

        Returns 1 when the member is new, 0 when it only changed score.
        """
        with self._new_session() as s:
            existed = s.execute(
                delete(SortedEntryRow).where(
                    SortedEntryRow.key == key, SortedEntryRow.member == member
                )
            ).rowcount
            s.add(SortedEntryRow(key=key, score=int(score), member=member))
            s.commit()
        return 0 if existed else 1

    def zremrangebyscore(self, key: str, min: Score, max: Score) -> int:
        with self._new_session() as s:
            q = delete(SortedEntryRow).where(*self._score_filter(key, min, max))
            removed = s.execute(q).rowcount
            s.commit()
        return removed

    # ---- reads ----------------------------------------------------------
    def zrange(self, key: str, offset: int = 0, count: int | None = None) -> list[str]:
        """All members of `key`, lowest score first."""
        q = (
            select(SortedEntryRow.member)
            .where(SortedEntryRow.key == key)
            .order_by(SortedEntryRow.score, SortedEntryRow.member)
        )
        with self._new_session() as s:
            return self._members(s.execute(_limit(q, offset, count)))

    def zrangebyscore(
        self,
        key: str,
        min: Score,
        max: Score,
        offset: int = 0,
        count: int | None = None,
    ) -> list[str]:
        q = (
            select(SortedEntryRow.member)
            .where(*self._score_filter(key, min, max))
            .order_by(SortedEntryRow.score, SortedEntryRow.member)
        )
        with self._new_session() as s:
            return self._members(s.execute(_limit(q, offset, count)))

    def zrevrangebyscore(
        self,
        key: str,
        max: Score,
        min: Score,
        offset: int = 0,
        count: int | None = None,
    ) -> list[str]:
        q = (
            select(SortedEntryRow.member)
            .where(*self._score_filter(key, min, max))
            .order_by(SortedEntryRow.score.desc(), SortedEntryRow.member.desc())
        )
        with self._new_session() as s:
            return self._members(s.execute(_limit(q, offset, count)))

    def zcard(self, key: str) -> int:
        q = select(func.count()).select_from(SortedEntryRow).where(
            SortedEntryRow.key == key
        )
        with self._new_session() as s:
            return s.execute(q).scalar_one()
