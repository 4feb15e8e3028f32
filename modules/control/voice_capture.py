"""
Voice capture window management.

Opens a single capture window when the mouth gesture opens and drives the
speech engine's start/stop requests. A window ends in exactly one of two
ways: a final recognized phrase arrives, or time runs out. Time runs out when
the gesture hits its max-open timeout, or when the window has been open for
max_capture_ms without a result. Closing the mouth naturally does not end
the window.
"""

import logging
from typing import Optional

from core.events import EventBus, Events
from core.types import CaptureWindow, CloseReason, SpeechResult

logger = logging.getLogger(__name__)


class VoiceCaptureController:
    """Gesture-driven speech capture with overlap guard and re-arm cooldown."""

    def __init__(self, engine, config: dict = None, event_bus: EventBus = None):
        config = config or {}
        self._cooldown_ms = float(config.get("cooldown_ms", 500))
        self._max_capture_ms = float(config.get("max_capture_ms", 10000))
        self._engine = engine
        self._window = CaptureWindow()
        self._bus = event_bus

        self._started = 0
        self._ignored = 0

        if self._bus is not None:
            self._bus.subscribe(Events.GESTURE_OPENED, self._on_gesture_opened)
            self._bus.subscribe(Events.GESTURE_CLOSED, self._on_gesture_closed)

    # =========================================================================
    # Gesture listeners
    # =========================================================================

    def _on_gesture_opened(self, at: float, **kwargs):
        self.start_capture(at)

    def _on_gesture_closed(self, at: float, reason: CloseReason, **kwargs):
        if reason is CloseReason.TIMEOUT:
            self.time_out(at)
        elif self._window.active:
            logger.debug("Mouth closed at %.0fms, still listening for a result", at)

    # =========================================================================
    # Window control
    # =========================================================================

    def start_capture(self, now_ms: float) -> bool:
        """Open a capture window and start the engine.

        Returns:
            True if a new window was opened, False if the request was ignored
        """
        if self._window.active:
            self._ignore("window already active since %.0fms" % self._window.started_at, now_ms)
            return False
        if now_ms < self._window.cooldown_until:
            self._ignore("cooling down until %.0fms" % self._window.cooldown_until, now_ms)
            return False

        self._window.active = True
        self._window.started_at = now_ms
        self._started += 1
        self._engine.start()
        logger.info("Listening (capture window opened at %.0fms)", now_ms)
        if self._bus is not None:
            self._bus.emit(Events.CAPTURE_STARTED, at=now_ms)
        return True

    def time_out(self, now_ms: float) -> bool:
        """Force-stop an active window once time has run out.

        Returns:
            True if a window was closed
        """
        if not self._window.active:
            logger.debug("Gesture timeout at %.0fms with no active window", now_ms)
            return False

        self._engine.stop()
        self._close(now_ms)
        logger.info("Capture timed out after %.0fms", now_ms - self._window.started_at)
        if self._bus is not None:
            self._bus.emit(Events.CAPTURE_TIMED_OUT, at=now_ms)
        return True

    def expire(self, now_ms: float) -> bool:
        """Time out a window that has outlived max_capture_ms.

        Returns:
            True if a window was closed
        """
        if not self._window.active:
            return False
        if now_ms - self._window.started_at < self._max_capture_ms:
            return False
        return self.time_out(now_ms)

    def handle_result(self, result: SpeechResult, now_ms: float) -> Optional[str]:
        """Accept a result from the speech engine.

        Only final results that arrive while a window is active end the
        window; everything else is dropped.

        Returns:
            The captured phrase, or None if the result was dropped
        """
        if not result.is_final:
            logger.debug("Interim result dropped: %r", result.text)
            return None
        if not self._window.active:
            logger.debug("Result %r arrived with no active window, dropped", result.text)
            return None

        self._engine.stop()
        self._close(now_ms)
        logger.info("Heard: %r", result.text)
        if self._bus is not None:
            self._bus.emit(Events.PHRASE_CAPTURED, text=result.text, at=now_ms)
        return result.text

    def _close(self, now_ms: float):
        self._window.active = False
        self._window.cooldown_until = now_ms + self._cooldown_ms

    def _ignore(self, why: str, now_ms: float):
        self._ignored += 1
        logger.debug("Capture request at %.0fms ignored: %s", now_ms, why)
        if self._bus is not None:
            self._bus.emit(Events.CAPTURE_IGNORED, at=now_ms)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def window(self) -> CaptureWindow:
        return self._window

    @property
    def is_active(self) -> bool:
        return self._window.active

    @property
    def windows_started(self) -> int:
        return self._started

    @property
    def requests_ignored(self) -> int:
        return self._ignored

    def reset(self):
        if self._window.active:
            self._engine.stop()
        self._window = CaptureWindow()
