"""
Face Mesh landmark sampling and display-coordinate mapping.
Turns the raw per-frame landmark array into the handful of named points
the interaction controller measures.
"""

import math
import logging
from typing import Optional

import numpy as np

from core.types import Point2D, FaceLandmarks

logger = logging.getLogger(__name__)

# MediaPipe Face Mesh landmark indices (468-point topology)
LEFT_EYE_OUTER = 234
RIGHT_EYE_OUTER = 454
UPPER_LIP_CENTER = 13
LOWER_LIP_CENTER = 14
NOSE_TIP = 4

DEFAULT_INDICES = {
    "left_eye": LEFT_EYE_OUTER,
    "right_eye": RIGHT_EYE_OUTER,
    "upper_lip": UPPER_LIP_CENTER,
    "lower_lip": LOWER_LIP_CENTER,
    "nose_tip": NOSE_TIP,
}


class LandmarkSampler:
    """Samples named face points and maps them into display pixels."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._width = config.get("display_width", 405)
        self._height = config.get("display_height", 720)
        self._mirror = config.get("mirror", True)

        self._indices = dict(DEFAULT_INDICES)
        self._indices.update(config.get("indices", {}))

        self._previous_nose: Optional[Point2D] = None
        self._face_present = False

    def set_display_size(self, width: int, height: int):
        """Set the target coordinate space."""
        self._width = width
        self._height = height

    def map_point(self, x: float, y: float) -> Point2D:
        """Map a normalized detector coordinate into display pixels."""
        if self._mirror:
            x = 1.0 - x
        return Point2D(float(x * self._width), float(y * self._height))

    def _point_at(self, keypoints: np.ndarray, index: int) -> Optional[Point2D]:
        if index < 0 or index >= len(keypoints):
            return None
        x, y = float(keypoints[index][0]), float(keypoints[index][1])
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        return self.map_point(x, y)

    def sample(self, keypoints: Optional[np.ndarray]) -> Optional[FaceLandmarks]:
        """Sample one frame.

        Args:
            keypoints: (N, 2|3) array of normalized landmarks for the tracked
                face, or None when no face was detected

        Returns:
            FaceLandmarks, or None when there is no face
        """
        if keypoints is None or len(keypoints) == 0:
            if self._face_present:
                logger.debug("Face lost")
            self._face_present = False
            self._previous_nose = None
            return None

        if not self._face_present:
            logger.debug("Face found (%d landmarks)", len(keypoints))
        self._face_present = True

        face = FaceLandmarks(
            **{name: self._point_at(keypoints, index) for name, index in self._indices.items()}
        )
        return face

    def advance(self, face: Optional[FaceLandmarks]) -> Optional[Point2D]:
        """Remember this frame's nose point and return the previous one."""
        previous = self._previous_nose
        self._previous_nose = face.nose_tip if face is not None else None
        return previous

    @property
    def previous_nose(self) -> Optional[Point2D]:
        return self._previous_nose

    @property
    def face_present(self) -> bool:
        return self._face_present

    def reset(self):
        self._previous_nose = None
        self._face_present = False
