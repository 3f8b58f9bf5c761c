"""
Error hierarchy for chronoset.

Everything raised on purpose derives from `SortedError` so callers can catch
the whole family in one place (an API layer maps these onto status codes).
"""

from __future__ import annotations


class SortedError(Exception):
    """Base class of every chronoset error."""


class SortedInputError(SortedError, ValueError):
    """Caller input rejected before any store mutation."""


class SortedRangeError(SortedInputError):
    """Range query or range delete with `start > stop`."""


class SortedOverlapError(SortedError):
    """Insert or move onto a `start` already occupied in the same scope."""


class SortedNotifyError(SortedError):
    """Appending to the event stream failed; the store mutation already happened."""


class SortedRollbackError(SortedError):
    """An update failed half way and the original entry could not be restored."""

    def __init__(self, message: str, original: BaseException | None = None):
        super().__init__(message)
        self.original = original


class SortedNotFoundError(SortedError, KeyError):
    """No record stored at the requested `start`."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class SortedStateError(SortedError):
    """Lifecycle misuse, e.g. updating a destroyed record."""
