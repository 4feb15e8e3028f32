"""
Head-nod browsing: a quick vertical nose movement steps through the
catalogue while the mouth is closed.
"""

import logging

from core.types import Velocity

logger = logging.getLogger(__name__)


class NodNavigator:
    """Rate-limited vertical nod detector."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._enabled = config.get("enabled", True)
        self._velocity_threshold = float(config.get("velocity_threshold", 10.0))
        self._cooldown_ms = float(config.get("cooldown_ms", 500))
        self._last_step_time = None

    def update(self, nose_velocity: Velocity, gesture_open: bool, now_ms: float) -> int:
        """Returns +1 for a downward nod, -1 for an upward nod, 0 otherwise."""
        if not self._enabled or gesture_open:
            return 0
        if abs(nose_velocity.y) <= self._velocity_threshold:
            return 0
        if self._last_step_time is not None and now_ms - self._last_step_time < self._cooldown_ms:
            return 0

        self._last_step_time = now_ms
        direction = 1 if nose_velocity.y > 0 else -1
        logger.debug("Nod %s (vy=%.1f)", "down" if direction > 0 else "up", nose_velocity.y)
        return direction

    @property
    def enabled(self) -> bool:
        return self._enabled

    def reset(self):
        self._last_step_time = None
