"""
Shared domain types for the Flower Mirror interaction controller.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.

All timestamps are milliseconds from a monotonic clock.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class Point2D:
    """A mapped screen-space coordinate. Absence is represented by None."""
    x: float
    y: float


class Velocity:
    """Frame-to-frame displacement of a tracked point."""

    __slots__ = ("x", "y", "speed")

    def __init__(self, x: float = 0.0, y: float = 0.0, speed: Optional[float] = None):
        self.x = x
        self.y = y
        self.speed = math.hypot(x, y) if speed is None else speed

    @classmethod
    def zero(cls) -> 'Velocity':
        return cls(0.0, 0.0, 0.0)

    def __eq__(self, other):
        if not isinstance(other, Velocity):
            return NotImplemented
        return (self.x, self.y, self.speed) == (other.x, other.y, other.speed)

    def __repr__(self):
        return f"Velocity(x={self.x:.1f}, y={self.y:.1f}, speed={self.speed:.1f})"


class FaceLandmarks:
    """Named face points sampled for one frame.

    Any point may be None when the detector did not provide it.
    """

    __slots__ = ("left_eye", "right_eye", "upper_lip", "lower_lip", "nose_tip")

    def __init__(self, left_eye: Optional[Point2D] = None,
                 right_eye: Optional[Point2D] = None,
                 upper_lip: Optional[Point2D] = None,
                 lower_lip: Optional[Point2D] = None,
                 nose_tip: Optional[Point2D] = None):
        self.left_eye = left_eye
        self.right_eye = right_eye
        self.upper_lip = upper_lip
        self.lower_lip = lower_lip
        self.nose_tip = nose_tip

    def __repr__(self):
        return (f"FaceLandmarks(eyes={self.left_eye}/{self.right_eye}, "
                f"lips={self.upper_lip}/{self.lower_lip}, nose={self.nose_tip})")


class Measurements:
    """Scalar measures derived from one frame of landmarks.

    Distances and angles are None whenever one of their points is missing.
    """

    __slots__ = ("eye_distance", "eye_angle", "mouth_gap", "mouth_angle", "nose_velocity")

    def __init__(self):
        self.eye_distance: Optional[float] = None
        self.eye_angle: Optional[float] = None
        self.mouth_gap: Optional[float] = None
        self.mouth_angle: Optional[float] = None
        self.nose_velocity: Velocity = Velocity.zero()


# =============================================================================
# Gesture / capture state
# =============================================================================

class CloseReason(Enum):
    """Why an open-mouth gesture ended."""
    NATURAL = "natural"
    TIMEOUT = "timeout"


class GestureState:
    """Debounced mouth gesture. Exactly one of open/closed holds."""

    __slots__ = ("is_open", "opened_at", "closed_at")

    def __init__(self):
        self.is_open: bool = False
        self.opened_at: Optional[float] = None
        self.closed_at: Optional[float] = None

    def __repr__(self):
        return (f"GestureState(open={self.is_open}, opened_at={self.opened_at}, "
                f"closed_at={self.closed_at})")


class GestureEvent:
    """Edge-triggered gesture transition."""

    __slots__ = ("opened", "at", "reason")

    def __init__(self, opened: bool, at: float, reason: Optional[CloseReason] = None):
        self.opened = opened
        self.at = at
        self.reason = reason

    def __repr__(self):
        if self.opened:
            return f"GestureEvent(opened at {self.at:.0f}ms)"
        return f"GestureEvent(closed at {self.at:.0f}ms, reason={self.reason.value})"


class CaptureWindow:
    """The single voice-capture window."""

    __slots__ = ("active", "started_at", "cooldown_until")

    def __init__(self):
        self.active: bool = False
        self.started_at: Optional[float] = None
        self.cooldown_until: float = 0.0

    def __repr__(self):
        return (f"CaptureWindow(active={self.active}, started_at={self.started_at}, "
                f"cooldown_until={self.cooldown_until})")


@dataclass(frozen=True)
class SpeechResult:
    """Result event delivered by a speech engine."""
    is_final: bool
    text: str


# =============================================================================
# Catalogue / selection
# =============================================================================

NOT_FOUND = -1


@dataclass(frozen=True)
class CatalogueEntry:
    """One selectable item with the phrasings a visitor might use for it."""
    primary_label: str
    synonyms: Tuple[str, ...]
    asset: Optional[str] = None


class Outcome(Enum):
    """Result of the last selection update."""
    MATCHED = "matched"
    NO_MATCH = "no_match"
    TIMED_OUT = "timed_out"
    NAVIGATED = "navigated"


class SelectionState:
    """Currently displayed catalogue index. Mutated only by SelectionResolver."""

    __slots__ = ("current_index", "last_outcome")

    def __init__(self, current_index: int = 0):
        self.current_index = current_index
        self.last_outcome: Optional[Outcome] = None

    def __repr__(self):
        outcome = self.last_outcome.value if self.last_outcome else None
        return f"SelectionState(index={self.current_index}, outcome={outcome})"
