"""
Two tables: one holds every sorted-set member, one holds every stream entry.
"""

import datetime as dt

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def now_utc() -> dt.datetime:  # compact timezone‑aware timestamp
    return dt.datetime.now(tz=dt.timezone.utc)


class SortedEntryRow(Base):
    """One member of one sorted set; `key` is the scope-qualified namespace."""

    __tablename__ = "sorted_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, nullable=False)
    score = Column(BigInteger, nullable=False)
    member = Column(Text, nullable=False)

    __table_args__ = (
        Index("ix_sorted_entries_key_score", "key", "score"),
    )


class StreamEntryRow(Base):
    """One appended stream entry; `fields` is the JSON-encoded field map."""

    __tablename__ = "stream_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, nullable=False, index=True)
    fields = Column(Text, nullable=False)
    created_ts = Column(DateTime(timezone=True), default=now_utc, nullable=False)
