"""
chronoset.events  ──  in-process hooks for record lifecycle notifications

    from chronoset import on, MetadataRecord

    @on.created(MetadataRecord)
    def announce(record, notification):
        ...

Hooks run after the notification reached the event stream.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Type

from .topics import CalendarTopic

if TYPE_CHECKING:
    from .core.record import SortedRecord

Hook = Callable[["SortedRecord", Dict[str, Any]], None]

KINDS = CalendarTopic.KINDS


class EventRegistry:
    """Central registry for lifecycle hooks"""

    def __init__(self):
        # kind -> class name -> handlers, in registration order
        self._handlers: Dict[str, Dict[str, List[Hook]]] = {
            kind: defaultdict(list) for kind in KINDS
        }

    def register(
        self,
        kind: str,
        record_classes: tuple[Type[SortedRecord], ...],
        handler: Hook,
    ) -> None:
        if kind not in self._handlers:
            raise ValueError(f"unknown event kind: {kind}")
        for cls in record_classes:
            handlers = self._handlers[kind][cls.__name__]
            if handler not in handlers:
                handlers.append(handler)

    def emit(self, kind: str, instance: SortedRecord, notification: Dict[str, Any]) -> None:
        """Call every handler registered for the instance's class or a parent"""
        seen: list[Hook] = []
        for cls in type(instance).__mro__:
            for handler in self._handlers[kind].get(cls.__name__, ()):
                if handler not in seen:
                    seen.append(handler)

        for handler in seen:
            handler(instance, notification)

    def clear(self) -> None:
        for handlers in self._handlers.values():
            handlers.clear()


# Global registry instance
registry = EventRegistry()


class OnDecorator:
    """Namespace for hook decorators"""

    @staticmethod
    def _decorator(kind: str, record_classes: tuple) -> Callable[[Hook], Hook]:
        def decorator(func: Hook) -> Hook:
            registry.register(kind, record_classes, func)
            return func

        return decorator

    def created(self, *record_classes: Type[SortedRecord]) -> Callable[[Hook], Hook]:
        """Run after a record of these classes was created"""
        return self._decorator("created", record_classes)

    def updated(self, *record_classes: Type[SortedRecord]) -> Callable[[Hook], Hook]:
        """Run after a record of these classes was updated"""
        return self._decorator("updated", record_classes)

    def deleted(self, *record_classes: Type[SortedRecord]) -> Callable[[Hook], Hook]:
        """Run after a record of these classes was destroyed"""
        return self._decorator("deleted", record_classes)


on = OnDecorator()
