"""Event system for the roast schedule.

Emits events for schedule entry lifecycle changes.
"""
import time
from typing import Any, Callable

from loguru import logger

from ..types import ScheduleEvent

logger = logger.bind(module="schedule.events")


# Type alias for event handlers
EventHandler = Callable[[ScheduleEvent], None]


class EventEmitter:
    """Event emitter for schedule events."""

    def __init__(self):
        self._handlers: list[EventHandler] = []

    def add_handler(self, handler: EventHandler) -> None:
        """Add an event handler."""
        self._handlers.append(handler)

    def remove_handler(self, handler: EventHandler) -> None:
        """Remove an event handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: ScheduleEvent) -> None:
        """Emit an event to all handlers."""
        for handler in self._handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error: {e}")


def emit_entry_event(
    emitter: EventEmitter,
    event_type: str,
    entry_id: str,
    payload: dict[str, Any] | None = None,
) -> None:
    """Emit a schedule entry event.

    Args:
        emitter: Event emitter instance
        event_type: Type of event (e.g., "schedule.created")
        entry_id: ID of the schedule entry
        payload: Additional event payload
    """
    event = ScheduleEvent(
        type=event_type,
        entry_id=entry_id,
        timestamp_ms=int(time.time() * 1000),
        payload=payload or {},
    )
    emitter.emit(event)


# Event type constants
class EventTypes:
    """Constants for event types."""

    CREATED = "schedule.created"
    UPDATED = "schedule.updated"
    COMPLETED = "schedule.completed"
    DELETED = "schedule.deleted"
