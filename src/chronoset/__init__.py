"""
Public surface for chronoset.
Importing this module does **not** connect to anything; build a handle with
`chronoset.init_chronoset()` (or `Chronoset.from_settings`) during start-up.
"""

from .bootstrap import init_chronoset
from .config import Settings
from .core.metadata import MetadataRecord
from .core.record import SortedRecord
from .errors import (
    SortedError,
    SortedInputError,
    SortedNotFoundError,
    SortedNotifyError,
    SortedOverlapError,
    SortedRangeError,
    SortedRollbackError,
    SortedStateError,
)
from .events import on
from .runtime import Chronoset
from .topics import CalendarTopic

__all__ = [
    "CalendarTopic",
    "Chronoset",
    "MetadataRecord",
    "Settings",
    "SortedError",
    "SortedInputError",
    "SortedNotFoundError",
    "SortedNotifyError",
    "SortedOverlapError",
    "SortedRangeError",
    "SortedRecord",
    "SortedRollbackError",
    "SortedStateError",
    "init_chronoset",
    "on",
]
