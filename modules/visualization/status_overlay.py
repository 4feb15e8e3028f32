"""
On-screen status overlay for the camera preview window.
Draws the selected entry, the prompt/status line, the last outcome message
and a mouth-gesture indicator.
"""

import time
import logging
import cv2
import numpy as np

logger = logging.getLogger(__name__)


class StatusOverlay:
    """Renders controller state onto a BGR frame."""

    def __init__(self, config: dict = None):
        config = config or {}
        colors = config.get("colors", {})
        self._color_text = tuple(colors.get("text", [255, 255, 255]))
        self._color_panel = tuple(colors.get("panel", [92, 54, 86]))  # lilac shadow
        self._color_open = tuple(colors.get("gesture_open", [0, 255, 0]))
        self._color_closed = tuple(colors.get("gesture_closed", [0, 0, 255]))
        self._panel_opacity = config.get("panel_opacity", 0.6)
        self._message_duration = config.get("message_duration_sec", 4.0)
        self._show_measurements = config.get("show_measurements", False)

        self._last_outcome_count = None
        self._message_time = 0.0

    def render(self, frame: np.ndarray, state: dict) -> np.ndarray:
        """Render overlay.

        Args:
            frame: BGR frame to draw on
            state: InteractionController.build_state() dict

        Returns:
            Frame with overlay
        """
        h, w = frame.shape[:2]

        message = state.get("feedback_message")
        outcome_count = state.get("outcome_count", 0)
        if outcome_count != self._last_outcome_count:
            self._last_outcome_count = outcome_count
            self._message_time = time.time()

        # Bottom panel
        panel_h = 90
        overlay = frame.copy()
        cv2.rectangle(overlay, (0, h - panel_h), (w, h), self._color_panel, -1)
        cv2.addWeighted(overlay, self._panel_opacity, frame, 1 - self._panel_opacity, 0, frame)

        label = state.get("current_label") or ""
        cv2.putText(frame, label.upper(), (15, h - 55),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.9, self._color_text, 2)
        cv2.putText(frame, state.get("status_message") or "", (15, h - 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.55, self._color_text, 1)

        # Outcome message fades after a few seconds
        if message and self.message_visible:
            cv2.putText(frame, message, (15, 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, self._color_text, 2)

        # Gesture indicator
        is_open = state.get("gesture_is_open", False)
        color = self._color_open if is_open else self._color_closed
        cv2.circle(frame, (w - 25, 25), 12, color, -1)
        if state.get("capture_active"):
            cv2.circle(frame, (w - 25, 25), 17, self._color_open, 2)

        if self._show_measurements:
            gap = state.get("mouth_gap")
            tilt = state.get("head_angle")
            text = "gap: %s  tilt: %s" % (
                "-" if gap is None else "%.1fpx" % gap,
                "-" if tilt is None else "%.0fdeg" % tilt,
            )
            cv2.putText(frame, text, (15, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.5, self._color_text, 1)

        return frame

    def canvas(self, width: int, height: int) -> np.ndarray:
        """Blank frame for when the camera has nothing to show."""
        return np.zeros((height, width, 3), dtype=np.uint8)

    @property
    def message_visible(self) -> bool:
        """True while the latest outcome message is still fading."""
        return time.time() - self._message_time < self._message_duration
