"""
SortedRecord kernel – records ordered by an integer `start`, one per slot.

* Each subclass owns a sorted set per scope: ``f"{scope}{PRIMARY_KEY}"``.
* The member is the record's JSON, the score is its `start`.
* Every successful create / update / destroy appends exactly one entry to
  the scope's calendar stream, then runs the in-process hooks.

The overlap check and the write that follows it are two store calls, so two
writers racing for the same `start` can both pass the check; the later write
wins.  Callers that need strict exclusivity must lock ``(scope, start)``
themselves.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, PrivateAttr, ValidationError

from ..errors import (
    SortedInputError,
    SortedNotFoundError,
    SortedNotifyError,
    SortedOverlapError,
    SortedRangeError,
    SortedRollbackError,
    SortedStateError,
)
from ..events import registry
from ..log import get_logger
from ..runtime import Chronoset
from ..topics import CalendarTopic

T_Record = TypeVar("T_Record", bound="SortedRecord")

log = get_logger(__name__)


class SortedRecord(BaseModel):
    """Base record: `scope`, `start`, `type`, `updated_at`.

    Construct with a `Chronoset` handle first, then keyword fields::

        record = SortedRecord(db, scope="DEFAULT", start=100)
        record.create()
    """

    RECORD_TYPE: ClassVar[str] = "sorted"  # overridden by subclasses
    PRIMARY_KEY: ClassVar[str] = "__SORTED"  # overridden by subclasses

    scope: str
    start: int
    type: str = "sorted"  # accepted for round trips, as_json emits RECORD_TYPE
    updated_at: int = 0

    model_config = {"extra": "forbid"}

    _db: Chronoset = PrivateAttr()
    _persisted: bool = PrivateAttr(default=False)
    _destroyed: bool = PrivateAttr(default=False)

    def __init__(self, db: Chronoset, /, *, _hydrating: bool = False, **data: Any):
        data = self._normalize(dict(data))
        try:
            super().__init__(**data)
        except ValidationError as error:
            raise SortedInputError(
                f"invalid {type(self).__name__}: {data}: {error}"
            ) from error
        self._db = db
        # stored records already own their slot
        self.validate_start(self.start, update=_hydrating)
        self._persisted = _hydrating

    # ---- keys -----------------------------------------------------------
    @classmethod
    def pk(cls, scope: str) -> str:
        return f"{scope}{cls.PRIMARY_KEY}"

    @property
    def primary_key(self) -> str:
        return self.pk(self.scope)

    # ---- class-level queries --------------------------------------------
    @classmethod
    def get(cls, db: Chronoset, *, scope: str, start: int) -> Optional[Dict[str, Any]]:
        """Stored JSON at exactly `start`, or None."""
        start = _check_start(start)
        result = db.store.zrangebyscore(cls.pk(scope), start, start, 0, 1)
        if not result:
            return None
        return json.loads(result[0])

    @classmethod
    def all(
        cls, db: Chronoset, *, scope: str, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Up to `limit` records of the scope, lowest `start` first."""
        limit = db.default_limit if limit is None else limit
        return [json.loads(item) for item in db.store.zrange(cls.pk(scope), 0, limit)]

    @classmethod
    def get_current_value(cls, db: Chronoset, *, scope: str) -> Optional[Dict[str, Any]]:
        """The record active now: greatest `start` not after the current second."""
        result = db.store.zrevrangebyscore(cls.pk(scope), db.now_s(), "-inf", 0, 1)
        if not result:
            return None
        return json.loads(result[0])

    @classmethod
    def range(
        cls,
        db: Chronoset,
        *,
        scope: str,
        start: int,
        stop: int,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Records with ``start <= record.start <= stop``, ascending."""
        start, stop = _check_range(start, stop)
        limit = db.default_limit if limit is None else limit
        result = db.store.zrangebyscore(cls.pk(scope), start, stop, 0, limit)
        return [json.loads(item) for item in result]

    @classmethod
    def count(cls, db: Chronoset, *, scope: str) -> int:
        return db.store.zcard(cls.pk(scope))

    @classmethod
    def remove(cls, db: Chronoset, *, scope: str, start: int) -> int:
        """Delete the entry at `start` without notifying; returns 0 or 1."""
        start = _check_start(start)
        return db.store.zremrangebyscore(cls.pk(scope), start, start)

    @classmethod
    def range_destroy(cls, db: Chronoset, *, scope: str, start: int, stop: int) -> int:
        """Delete every entry from `start` to `stop` inclusive; returns the count."""
        start, stop = _check_range(start, stop)
        removed = db.store.zremrangebyscore(cls.pk(scope), start, stop)
        log.info(
            "records_range_deleted",
            record_type=cls.RECORD_TYPE,
            scope=scope,
            start=start,
            stop=stop,
            removed=removed,
        )
        return removed

    # ---- hydration ------------------------------------------------------
    @classmethod
    def from_json(
        cls: Type[T_Record], db: Chronoset, data: Union[str, bytes, Dict[str, Any]]
    ) -> T_Record:
        """Rebuild a record from its JSON without the overlap check."""
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        if not isinstance(data, dict):
            raise SortedInputError(f"{cls.__name__} JSON must be an object: {data!r}")
        return cls(db, _hydrating=True, **data)

    @classmethod
    def hydrate(cls: Type[T_Record], db: Chronoset, *, scope: str, start: int) -> T_Record:
        """Load the stored record at `start` as an instance."""
        data = cls.get(db, scope=scope, start=start)
        if data is None:
            raise SortedNotFoundError(
                f"{cls.__name__} not found at start: {start} in scope: {scope}"
            )
        return cls.from_json(db, data)

    # ---- validation -----------------------------------------------------
    @classmethod
    def _normalize(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Check and normalize raw field values before pydantic sees them."""
        data["start"] = _check_start(data.get("start"))
        return data

    def validate_start(self, start: Any, update: bool = False) -> int:
        """`start` must be a non-negative int, and free unless updating."""
        start = _check_start(start)
        if not update:
            existing = self.get(self._db, scope=self.scope, start=start)
            if existing is not None:
                raise SortedOverlapError(
                    f"no record can overlap, existing data at {start}: {existing}"
                )
        return start

    # ---- lifecycle ------------------------------------------------------
    def create(self) -> None:
        """Persist at `start` and notify ``created``."""
        self._ensure_live()
        if self._persisted:
            raise SortedStateError(
                f"{type(self).__name__} at start: {self.start} in scope: {self.scope} was already created"
            )
        self._write()
        self._persisted = True
        log.info(
            "record_created", record_type=self.RECORD_TYPE, scope=self.scope, start=self.start
        )
        self.notify("created")

    def update(self, *, start: int) -> None:
        """Move the record to `start` and notify ``updated``."""
        start = self.validate_start(start, update=True)
        self._replace(start=start)

    def destroy(self) -> None:
        """Remove the record from the store and notify ``deleted``."""
        self._ensure_live()
        self._ensure_persisted()
        self.remove(self._db, scope=self.scope, start=self.start)
        self._destroyed = True
        log.info(
            "record_deleted", record_type=self.RECORD_TYPE, scope=self.scope, start=self.start
        )
        self.notify("deleted")

    def notify(self, kind: str, extra: Any = None) -> str:
        """Append the current state to the scope's calendar stream.

        Runs after the store mutation, which is not undone when the append
        fails.  Returns the stream entry id.
        """
        if kind not in CalendarTopic.KINDS:
            raise SortedInputError(f"unknown notification kind: {kind}")
        notification = {
            "data": self.to_json(),
            "kind": kind,
            "type": CalendarTopic.TYPE,
        }
        if extra is not None:
            notification["extra"] = str(extra)
        try:
            entry_id = CalendarTopic.write_entry(self._db, notification, scope=self.scope)
        except Exception as error:
            log.error(
                "notify_failed", scope=self.scope, start=self.start, kind=kind, error=str(error)
            )
            raise SortedNotifyError(
                f"Failed to write to stream: {notification}, {error}"
            ) from error
        registry.emit(kind, self, notification)
        return entry_id

    # ---- serialization --------------------------------------------------
    def as_json(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "start": self.start,
            "type": self.RECORD_TYPE,
            "updated_at": self.updated_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.as_json())

    def __str__(self) -> str:
        return f"<{type(self).__name__} s: {self.start}>"

    # ---- internals ------------------------------------------------------
    def _ensure_live(self) -> None:
        if self._destroyed:
            raise SortedStateError(
                f"{type(self).__name__} at start: {self.start} in scope: {self.scope} was destroyed"
            )

    def _ensure_persisted(self) -> None:
        if not self._persisted:
            raise SortedStateError(
                f"{type(self).__name__} at start: {self.start} in scope: {self.scope} was never created"
            )

    def _write(self) -> None:
        """Overlap re-check, stamp `updated_at`, store the JSON at `start`."""
        existing = self.get(self._db, scope=self.scope, start=self.start)
        if existing is not None:
            raise SortedOverlapError(
                f"no record can overlap, start: {self.start}, existing: {existing}"
            )
        previous = self.updated_at
        self.updated_at = self._db.now_ns()
        try:
            self._db.store.zadd(self.primary_key, self.start, self.to_json())
        except Exception:
            self.updated_at = previous
            raise

    def _replace(self, **changes: Any) -> None:
        """Remove the old entry, write the changed one, notify ``updated``.

        `changes` must already be validated.  If the write fails, the old
        entry is written back and the error re-raised; if that fails too,
        `SortedRollbackError` is raised.
        """
        self._ensure_live()
        self._ensure_persisted()
        old_start = self.start
        new_start = changes["start"]
        if new_start != old_start:
            existing = self.get(self._db, scope=self.scope, start=new_start)
            if existing is not None:
                raise SortedOverlapError(
                    f"no record can overlap, existing data at {new_start}: {existing}"
                )

        previous = {name: getattr(self, name) for name in type(self).model_fields}
        previous_member = self.to_json()
        removed = self.remove(self._db, scope=self.scope, start=old_start)
        for name, value in changes.items():
            setattr(self, name, value)
        try:
            self._write()
        except Exception as error:
            self._rollback(old_start, previous, previous_member, removed, error)
            raise

        log.info(
            "record_updated",
            record_type=self.RECORD_TYPE,
            scope=self.scope,
            start=self.start,
            old_start=old_start,
        )
        self.notify("updated", extra=old_start)

    def _rollback(
        self,
        old_start: int,
        previous: Dict[str, Any],
        previous_member: str,
        removed: int,
        error: Exception,
    ) -> None:
        for name, value in previous.items():
            setattr(self, name, value)
        if not removed:
            return
        try:
            self._db.store.zadd(self.primary_key, old_start, previous_member)
        except Exception as restore_error:
            log.error(
                "update_rollback_failed",
                scope=self.scope,
                start=old_start,
                error=str(error),
                restore_error=str(restore_error),
            )
            raise SortedRollbackError(
                f"update of start: {old_start} in scope: {self.scope} failed ({error}) "
                f"and restoring the original entry failed ({restore_error}); "
                f"lost entry: {previous_member}",
                original=error,
            ) from restore_error
        log.warning("update_rolled_back", scope=self.scope, start=old_start, error=str(error))


def _check_start(start: Any) -> int:
    if isinstance(start, bool) or not isinstance(start, int):
        raise SortedInputError(f"start must be integer: {start!r}")
    if start < 0:
        raise SortedInputError(f"start must be positive: {start}")
    return int(start)


def _check_range(start: Any, stop: Any) -> tuple[int, int]:
    start, stop = _check_start(start), _check_start(stop)
    if start > stop:
        raise SortedRangeError(f"start: {start} must be before stop: {stop}")
    return start, stop
