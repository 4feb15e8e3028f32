"""
MediaPipe Face Mesh wrapper tracking a single face.
"""

import logging
from typing import Optional

import numpy as np
import mediapipe as mp

logger = logging.getLogger(__name__)


class FaceDetector:
    """MediaPipe Face Mesh wrapper returning the tracked face's landmarks."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._max_faces = config.get("max_num_faces", 1)
        self._refine = config.get("refine_landmarks", False)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)

        self._mp_face_mesh = mp.solutions.face_mesh
        self._mp_drawing = mp.solutions.drawing_utils
        self._mp_drawing_styles = mp.solutions.drawing_styles

        self._face_mesh = None
        self._initialized = False
        self._last_results = None

    def initialize(self):
        """Initialize MediaPipe Face Mesh."""
        self._face_mesh = self._mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=self._max_faces,
            refine_landmarks=self._refine,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        self._initialized = True
        logger.info(
            "MediaPipe Face Mesh initialized (max_faces=%d, refine=%s, "
            "detect_conf=%.2f, track_conf=%.2f)",
            self._max_faces, self._refine,
            self._min_detect_conf, self._min_track_conf,
        )

    def detect(self, rgb_frame: np.ndarray) -> Optional[np.ndarray]:
        """Run face detection on an RGB frame.

        Returns:
            np.ndarray of shape (N, 3) with normalized coordinates for the
            first face, or None when no face is visible
        """
        if not self._initialized:
            self.initialize()

        rgb_frame.flags.writeable = False
        results = self._face_mesh.process(rgb_frame)
        rgb_frame.flags.writeable = True
        self._last_results = results

        if not results or not results.multi_face_landmarks:
            return None
        return self.extract_landmarks(results.multi_face_landmarks[0])

    @staticmethod
    def extract_landmarks(face_landmarks) -> np.ndarray:
        """Convert MediaPipe landmarks to a numpy array of (x, y, z)."""
        points = face_landmarks.landmark
        landmarks = np.zeros((len(points), 3), dtype=np.float32)
        for i, lm in enumerate(points):
            landmarks[i] = [lm.x, lm.y, lm.z]
        return landmarks

    def draw_landmarks(self, frame: np.ndarray) -> np.ndarray:
        """Draw the last detected face's contours on a BGR frame."""
        results = self._last_results
        if results and results.multi_face_landmarks:
            for face_landmarks in results.multi_face_landmarks:
                self._mp_drawing.draw_landmarks(
                    image=frame,
                    landmark_list=face_landmarks,
                    connections=self._mp_face_mesh.FACEMESH_CONTOURS,
                    landmark_drawing_spec=None,
                    connection_drawing_spec=self._mp_drawing_styles.get_default_face_mesh_contours_style(),
                )
        return frame

    def close(self):
        """Release MediaPipe resources."""
        if self._face_mesh:
            self._face_mesh.close()
            self._face_mesh = None
            self._initialized = False
            logger.info("MediaPipe Face Mesh closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
