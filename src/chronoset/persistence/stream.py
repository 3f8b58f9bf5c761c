"""
Append-only event stream kept in the `stream_entries` table.
"""

from __future__ import annotations

import json

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .models import StreamEntryRow


class SqlEventStream:
    """Stream entries as rows; the autoincrement id orders them."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _new_session(self) -> Session:
        return Session(bind=self.engine, future=True)

    def append(self, key: str, fields: dict[str, str]) -> str:
        """Insert one entry **exactly once** and return its id."""
        row = StreamEntryRow(key=key, fields=json.dumps(fields))
        with self._new_session() as s:
            s.add(row)
            s.commit()
            return str(row.id)

    def read(
        self, key: str, count: int | None = None
    ) -> list[tuple[str, dict[str, str]]]:
        """Entries of `key`, oldest first."""
        q = (
            select(StreamEntryRow.id, StreamEntryRow.fields)
            .where(StreamEntryRow.key == key)
            .order_by(StreamEntryRow.id)
        )
        if count is not None:
            q = q.limit(count)
        with self._new_session() as s:
            return [(str(id_), json.loads(fields)) for id_, fields in s.execute(q)]
