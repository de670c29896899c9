"""
Typed event bus for dialogue lifecycle notifications.

Uses Enums for event types so observers subscribe to
``DialogueEvent.LINE_CHANGED`` rather than magic strings.

Usage:
    bus = EventBus()
    bus.subscribe(DialogueEvent.LINE_CHANGED, on_line, weak=False)
    bus.publish(DialogueEvent.LINE_CHANGED, session=session, line=line)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

from dialogue_engine.core.errors import DialogueEngineError

logger = logging.getLogger(__name__)


class DialogueEvent(Enum):
    """Notifications published by a dialogue session."""
    DIALOGUE_STARTED = auto()
    LINE_CHANGED = auto()
    DIALOGUE_ENDED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub shared between a dialogue manager and its sessions.

    Features:
    - Typed events (Enum-based)
    - Priority ordering, stable for equal priorities
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers

    Every live handler receives every event. Events published from inside a
    handler are queued and delivered after the current dispatch finishes, so
    every observer sees notifications in publication order.

    A handler that raises is logged and skipped, except for
    ``DialogueEngineError`` (e.g. misuse of a session from a callback),
    which propagates to the publisher and drops any queued events.
    """

    def __init__(self):
        # event type -> list of (priority, handler_ref, one_shot)
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, hold a weak reference (lambdas need weak=False)
        """
        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        handlers = self._handlers.setdefault(event_type, [])

        insert_idx = len(handlers)
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break

        handlers.insert(insert_idx, (priority, handler_ref, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove every registration of ``handler`` for ``event_type``."""
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return

        # In place: a running dispatch holds a reference to this list.
        handlers[:] = [
            (p, h, o) for p, h, o in handlers
            if self._get_handler(h) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event object
        """
        event = Event(type=event_type, data=data)
        self.publish_event(event)
        return event

    def publish_event(self, event: Event) -> None:
        """Publish a pre-created event."""
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

    def handler_count(self, event_type: Enum) -> int:
        """Number of live registrations for an event type."""
        return sum(
            1 for _, h, _ in self._handlers.get(event_type, [])
            if self._get_handler(h) is not None
        )

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        self._is_publishing = True
        try:
            self._deliver(event)
            while self._event_queue:
                self._deliver(self._event_queue.pop(0))
        finally:
            self._is_publishing = False
            self._event_queue.clear()

    def _deliver(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if not handlers:
            return

        to_remove = []

        try:
            # Iterate over a snapshot; handlers may subscribe while we deliver.
            for entry in list(handlers):
                _, handler_ref, one_shot = entry
                handler = self._get_handler(handler_ref)

                if handler is None:
                    to_remove.append(entry)
                    continue

                if one_shot:
                    to_remove.append(entry)

                try:
                    handler(event)
                except DialogueEngineError:
                    raise
                except Exception:
                    logger.exception("Error in event handler for %s", event.type)
        finally:
            for entry in to_remove:
                if entry in handlers:
                    handlers.remove(entry)

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
