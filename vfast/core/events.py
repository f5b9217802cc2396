"""
In-process event bus for workflow notifications.

Services publish events only after their transaction commits. Mailers and
other consumers subscribe by event type; a handler that fails is logged
and does not affect the other handlers or the caller.
"""
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from vfast.core.logging import get_logger, get_struct_logger

logger = get_logger(__name__)
event_logger = get_struct_logger("vfast.events")

BOOKING_CREATED = "BookingCreated"
BOOKING_STATUS_CHANGED = "BookingStatusChanged"
ROOM_ALLOCATED = "RoomAllocated"
BOOKING_REJECTED_BY_ADMIN = "BookingRejectedByAdmin"
BOOKING_RESUBMITTED = "BookingResubmitted"

ALL_EVENT_TYPES = (
    BOOKING_CREATED,
    BOOKING_STATUS_CHANGED,
    ROOM_ALLOCATED,
    BOOKING_REJECTED_BY_ADMIN,
    BOOKING_RESUBMITTED,
)

Handler = Callable[["BookingEvent"], None]


class BookingEvent:
    """A workflow event about one booking."""

    def __init__(self, event_type: str, booking_id: int, data: Optional[Dict[str, Any]] = None):
        self.event_id = str(uuid4())
        self.event_type = event_type
        self.booking_id = booking_id
        self.data = data or {}
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"{self.event_type}({self.booking_id})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "booking_id": self.booking_id,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


class EventBus:
    """
    Synchronous publish/subscribe bus.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"Registered handler for event type: {event_type}")

    def subscribe_all(self, handler: Handler) -> None:
        for event_type in ALL_EVENT_TYPES:
            self.subscribe(event_type, handler)

    def publish(self, event: BookingEvent) -> None:
        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug(f"No handlers found for event type: {event.event_type}")
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler failed for {event}: {e}",
                    exc_info=True,
                    extra={"event_type": event.event_type, "booking_id": event.booking_id},
                )


def log_event(event: BookingEvent) -> None:
    """Default subscriber: record every workflow event in the log."""
    event_logger.info("event_published", **event.to_dict())


event_bus = EventBus()
event_bus.subscribe_all(log_event)


__all__ = [
    "BOOKING_CREATED",
    "BOOKING_STATUS_CHANGED",
    "ROOM_ALLOCATED",
    "BOOKING_REJECTED_BY_ADMIN",
    "BOOKING_RESUBMITTED",
    "ALL_EVENT_TYPES",
    "BookingEvent",
    "EventBus",
    "event_bus",
    "log_event",
]
