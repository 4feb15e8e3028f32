"""
Pure geometric measures between mapped face points.

Every function tolerates missing points: distances and angles propagate
None, velocity falls back to a zero vector so motion-driven logic never
stalls on a dropped frame.
"""

import math
from typing import Optional

from core.types import Point2D, Velocity, FaceLandmarks, Measurements


def distance(p1: Optional[Point2D], p2: Optional[Point2D]) -> Optional[float]:
    """Euclidean distance in the points' own units (screen pixels)."""
    if p1 is None or p2 is None:
        return None
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def angle(base: Optional[Point2D], end: Optional[Point2D]) -> Optional[float]:
    """Angle of the base->end vector from horizontal, in degrees [0, 360)."""
    if base is None or end is None:
        return None
    degrees = math.degrees(math.atan2(end.y - base.y, end.x - base.x))
    if degrees < 0:
        degrees += 360.0
    # -0.0 and tiny negatives round up to exactly 360.0
    if degrees >= 360.0:
        degrees = 0.0
    return degrees


def velocity(current: Optional[Point2D], previous: Optional[Point2D]) -> Velocity:
    """Displacement since the previous frame; zero if either point is missing."""
    if current is None or previous is None:
        return Velocity.zero()
    vx = current.x - previous.x
    vy = current.y - previous.y
    return Velocity(vx, vy, math.hypot(vx, vy))


def measure(face: Optional[FaceLandmarks], previous_nose: Optional[Point2D] = None) -> Measurements:
    """Compute all per-frame measurements for a sampled face."""
    result = Measurements()
    if face is None:
        return result

    result.eye_distance = distance(face.left_eye, face.right_eye)
    result.eye_angle = angle(face.left_eye, face.right_eye)
    result.mouth_gap = distance(face.upper_lip, face.lower_lip)
    result.mouth_angle = angle(face.upper_lip, face.lower_lip)
    result.nose_velocity = velocity(face.nose_tip, previous_nose)
    return result
