"""
The calendar topic: one event stream per scope announcing record changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime import Chronoset


class CalendarTopic:
    PRIMARY_KEY = "__CALENDAR"
    TYPE = "calendar"
    KINDS = ("created", "updated", "deleted")

    @classmethod
    def topic(cls, scope: str) -> str:
        return f"{scope}{cls.PRIMARY_KEY}"

    @classmethod
    def write_entry(cls, db: "Chronoset", entry: dict[str, str], *, scope: str) -> str:
        """Append `entry` to the scope's stream and return the entry id."""
        return db.stream.append(cls.topic(scope), entry)

    @classmethod
    def read_entries(
        cls, db: "Chronoset", *, scope: str, count: int | None = None
    ) -> list[dict[str, str]]:
        """Notifications of `scope`, oldest first, each with its stream ``id``."""
        return [
            {"id": entry_id, **fields}
            for entry_id, fields in db.stream.read(cls.topic(scope), count=count)
        ]
