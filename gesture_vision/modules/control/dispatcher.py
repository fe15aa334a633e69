"""
Turns fused results into outbound gesture events.

Only decisive gestures (HIGHER/LOWER) are published; NEUTRAL and NONE are
suppressed so an idle camera does not flood subscribers. Status events
(calibrating, error, stopped) bypass fusion and are published directly.
"""

import time
import logging
from typing import Callable, Optional

from gesture_vision.core.events import EventBus, Events
from gesture_vision.core.types import (
    EventKind, FusedResult, GestureEvent, GestureType, GESTURE_MESSAGES,
)

logger = logging.getLogger(__name__)

_GESTURE_EVENT_KINDS = {
    GestureType.HIGHER: EventKind.HIGHER,
    GestureType.LOWER: EventKind.LOWER,
}


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class EventDispatcher:
    """Publishes gesture and status events to per-session topics."""

    def __init__(self, bus: EventBus, clock: Callable[[], int] = _epoch_millis):
        self._bus = bus
        self._clock = clock
        self._published = 0
        self._suppressed = 0

    def dispatch(self, session_id: str, result: FusedResult) -> Optional[GestureEvent]:
        """Publish ``result`` if it carries a decisive gesture.

        Returns:
            The published GestureEvent, or None when suppressed.
        """
        kind = _GESTURE_EVENT_KINDS.get(result.gesture)
        if kind is None:
            self._suppressed += 1
            return None

        event = GestureEvent(
            session_id=session_id,
            gesture=kind,
            message=GESTURE_MESSAGES[result.gesture],
            timestamp=self._clock(),
        )
        self._publish(event)
        logger.info("Session %s: %-6s | conf=%.2f", session_id, kind.value, result.confidence)
        return event

    def emit_status(self, session_id: str, kind: EventKind, message: str) -> GestureEvent:
        """Publish a calibrating/error/stopped event."""
        if not kind.is_status:
            raise ValueError("%s is not a status event" % kind.value)
        event = GestureEvent(session_id=session_id, gesture=kind,
                             message=message, timestamp=self._clock())
        self._publish(event)
        logger.info("Session %s: status %s (%s)", session_id, kind.value, message)
        return event

    def _publish(self, event: GestureEvent):
        self._published += 1
        self._bus.emit(Events.gesture_topic(event.session_id), event=event)
        self._bus.emit(Events.GESTURE, event=event)

    @property
    def published_count(self) -> int:
        return self._published

    @property
    def suppressed_count(self) -> int:
        return self._suppressed
