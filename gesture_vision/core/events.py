"""
Lightweight event bus between the vision pipeline and its transport.

The transport collaborator (WebSocket/STOMP broker, message queue, ...)
subscribes to per-session topics; the dispatcher and the game bridge
publish to them.

Usage:
    bus = EventBus()
    bus.subscribe(Events.gesture_topic("abc"), send_to_client)
    bus.emit(Events.gesture_topic("abc"), event=gesture_event)
"""

import time
import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe publish/subscribe event bus.

    Listeners are called synchronously on the publishing thread, highest
    priority first. A failing listener is logged and never reaches the
    publisher.
    """

    def __init__(self, max_history: int = 100):
        self._listeners = defaultdict(list)  # topic -> [(priority, callback)]
        self._lock = threading.Lock()
        self._event_history = []
        self._max_history = max_history
        self._enabled = True

    def subscribe(self, topic: str, callback: Callable, priority: int = 0):
        """Register a listener for a topic.

        Args:
            topic: Topic to listen on
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        with self._lock:
            self._listeners[topic].append((priority, callback))
            self._listeners[topic].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     topic, getattr(callback, "__name__", repr(callback)), priority)

    def unsubscribe(self, topic: str, callback: Callable):
        """Remove a listener from a topic."""
        with self._lock:
            remaining = [(p, cb) for p, cb in self._listeners.get(topic, []) if cb is not callback]
            if remaining:
                self._listeners[topic] = remaining
            else:
                self._listeners.pop(topic, None)

    def emit(self, topic: str, **kwargs) -> int:
        """Publish to all listeners of a topic.

        Returns:
            Number of listeners that handled the event without raising.
        """
        if not self._enabled:
            return 0

        with self._lock:
            listeners = list(self._listeners.get(topic, []))
            self._event_history.append({
                "topic": topic,
                "time": time.time(),
                "data_keys": list(kwargs.keys()),
            })
            if len(self._event_history) > self._max_history:
                self._event_history = self._event_history[-self._max_history:]

        delivered = 0
        for _priority, callback in listeners:
            try:
                callback(**kwargs)
                delivered += 1
            except Exception:
                logger.exception("Event handler error [%s -> %s]",
                                 topic, getattr(callback, "__name__", repr(callback)))
        return delivered

    def clear(self, topic: str = None):
        """Remove all listeners, optionally for a specific topic."""
        with self._lock:
            if topic:
                self._listeners.pop(topic, None)
            else:
                self._listeners.clear()

    def set_enabled(self, enabled: bool):
        self._enabled = enabled

    @property
    def registered_topics(self) -> list:
        with self._lock:
            return list(self._listeners.keys())

    @property
    def listener_count(self) -> int:
        with self._lock:
            return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent publish history."""
        with self._lock:
            return self._event_history[-last_n:]


# =============================================================================
# Standard Topics (constants to avoid typos)
# =============================================================================

class Events:
    """Topic names used between the service and its collaborators."""

    GESTURE = "gesture"
    GAME = "game"

    @staticmethod
    def gesture_topic(session_id: str) -> str:
        return f"{Events.GESTURE}/{session_id}"

    @staticmethod
    def game_topic(session_id: str) -> str:
        return f"{Events.GAME}/{session_id}"
