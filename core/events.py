"""
Lightweight event bus for decoupled inter-module communication.

Components publish state transitions (gesture edges, capture results,
selection changes) instead of calling each other directly.

Usage:
    bus = EventBus()
    bus.subscribe(Events.GESTURE_OPENED, my_handler)
    bus.emit(Events.GESTURE_OPENED, at=1200.0)
"""

import time
import logging
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous publish/subscribe bus with priority ordering.

    One bus belongs to one InteractionController. Dispatch happens on the
    caller's thread, so listeners run in the same tick as the emitter.
    """

    def __init__(self, max_history: int = 100):
        self._listeners = defaultdict(list)  # event_name -> [(priority, callback)]
        self._event_history = []
        self._max_history = max_history
        self._enabled = True

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register a listener for an event.

        Args:
            event_name: Event to listen for
            callback: Function to call. Receives **kwargs from emit().
            priority: Higher priority callbacks run first (default 0)
        """
        self._listeners[event_name].append((priority, callback))
        # Stable sort keeps registration order within a priority
        self._listeners[event_name].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", callback), priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        """Remove a listener for an event."""
        self._listeners[event_name] = [
            (p, cb) for p, cb in self._listeners[event_name] if cb is not callback
        ]

    def emit(self, event_name: str, **kwargs):
        """Emit an event to all registered listeners.

        Args:
            event_name: Event name to emit
            **kwargs: Data passed to all listeners
        """
        if not self._enabled:
            return

        listeners = list(self._listeners.get(event_name, []))

        self._event_history.append({
            "event": event_name,
            "time": time.time(),
            "data": dict(kwargs),
        })
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

        for priority, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", callback), e)

    def set_enabled(self, enabled: bool):
        self._enabled = enabled

    def clear(self, event_name: str = None):
        """Remove all listeners, optionally for a specific event."""
        if event_name:
            self._listeners.pop(event_name, None)
        else:
            self._listeners.clear()

    @property
    def registered_events(self) -> list:
        """List all events with registered listeners."""
        return [name for name, cbs in self._listeners.items() if cbs]

    @property
    def listener_count(self) -> int:
        """Total number of registered listeners."""
        return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent event history."""
        return self._event_history[-last_n:]

    def count(self, event_name: str) -> int:
        """How many times an event is in the retained history."""
        return sum(1 for entry in self._event_history if entry["event"] == event_name)


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Tracking
    FACE_FOUND = "face_found"
    FACE_LOST = "face_lost"

    # Gesture edges
    GESTURE_OPENED = "gesture_opened"
    GESTURE_CLOSED = "gesture_closed"

    # Voice capture
    CAPTURE_STARTED = "capture_started"
    CAPTURE_IGNORED = "capture_ignored"
    CAPTURE_TIMED_OUT = "capture_timed_out"
    PHRASE_CAPTURED = "phrase_captured"

    # Selection
    SELECTION_CHANGED = "selection_changed"

    # Lifecycle
    SYSTEM_STARTED = "system_started"
    SYSTEM_SHUTDOWN = "system_shutdown"
