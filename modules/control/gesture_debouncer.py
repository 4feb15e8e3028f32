"""
Hysteresis debouncer for the open-mouth gesture.

Lifecycle:
    closed -> open   mouth gap rises above open_threshold and the re-arm
                     cooldown has elapsed since the last close
    open -> closed   mouth gap falls below close_threshold (natural), or
                     max_open_ms elapses since opening (timeout)

Losing the face holds the current state; only the timeout can end an open
gesture without a measurement.
"""

import logging
from typing import Optional

from core.events import Events
from core.types import GestureState, GestureEvent, CloseReason

logger = logging.getLogger(__name__)


class GestureDebouncer:
    """Turns a noisy mouth-gap distance into edge-triggered open/close events."""

    def __init__(self, config: dict = None, event_bus=None):
        config = config or {}
        self._open_threshold = float(config.get("open_threshold", 3.0))
        self._close_threshold = float(config.get("close_threshold", 2.0))
        self._rearm_cooldown_ms = float(config.get("rearm_cooldown_ms", 500))
        self._max_open_ms = float(config.get("max_open_ms", 10000))

        if self._close_threshold >= self._open_threshold:
            raise ValueError(
                f"close_threshold ({self._close_threshold}) must be below "
                f"open_threshold ({self._open_threshold})"
            )

        self._bus = event_bus
        self._state = GestureState()

    def update(self, mouth_gap: Optional[float], now_ms: float) -> Optional[GestureEvent]:
        """Feed one measurement.

        Args:
            mouth_gap: Lip distance in pixels, or None when not measurable
            now_ms: Current monotonic time in ms

        Returns:
            GestureEvent on a transition, None otherwise
        """
        state = self._state

        if state.is_open:
            if now_ms - state.opened_at >= self._max_open_ms:
                return self._close(now_ms, CloseReason.TIMEOUT)
            if mouth_gap is not None and mouth_gap < self._close_threshold:
                return self._close(now_ms, CloseReason.NATURAL)
            return None

        if mouth_gap is None or mouth_gap <= self._open_threshold:
            return None

        if state.closed_at is not None and now_ms - state.closed_at < self._rearm_cooldown_ms:
            logger.debug("Open suppressed: %.0fms since close (< %.0fms)",
                         now_ms - state.closed_at, self._rearm_cooldown_ms)
            return None

        return self._open(now_ms)

    def _open(self, now_ms: float) -> GestureEvent:
        self._state.is_open = True
        self._state.opened_at = now_ms
        logger.debug("Gesture opened at %.0fms", now_ms)
        if self._bus is not None:
            self._bus.emit(Events.GESTURE_OPENED, at=now_ms)
        return GestureEvent(True, now_ms)

    def _close(self, now_ms: float, reason: CloseReason) -> GestureEvent:
        held_ms = now_ms - self._state.opened_at
        self._state.is_open = False
        self._state.closed_at = now_ms
        logger.debug("Gesture closed at %.0fms (%s, held %.0fms)", now_ms, reason.value, held_ms)
        if self._bus is not None:
            self._bus.emit(Events.GESTURE_CLOSED, at=now_ms, reason=reason)
        return GestureEvent(False, now_ms, reason)

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    def reset(self):
        """Back to the initial closed state."""
        self._state = GestureState()
