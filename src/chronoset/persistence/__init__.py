from .store import SqlOrderedStore
from .stream import SqlEventStream

__all__ = ["SqlOrderedStore", "SqlEventStream"]
