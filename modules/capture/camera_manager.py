"""
Camera capture for the face tracker.

A camera that cannot be opened, or stops delivering frames, simply yields
no frames; the controller treats that as a persistent "camera not ready"
condition rather than an error.
"""

import time
import threading
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

_BACKENDS = {
    "v4l2": cv2.CAP_V4L2,
    "dshow": cv2.CAP_DSHOW,
    "avfoundation": cv2.CAP_AVFOUNDATION,
    "auto": cv2.CAP_ANY,
}


class CameraManager:
    """Webcam capture holding only the latest frame."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._device_id = config.get("device_id", 0)
        self._width = config.get("width", 640)
        self._height = config.get("height", 480)
        self._fps = config.get("fps", 30)
        self._backend = config.get("backend", "auto")
        self._threaded = config.get("threaded", True)

        self._cap = None
        self._frame: Optional[np.ndarray] = None
        self._frame_id = 0
        self._lock = threading.Lock()
        self._running = False
        self._thread = None

    def open(self) -> bool:
        """Open the device. Returns False if the camera is unavailable."""
        backend = _BACKENDS.get(self._backend, cv2.CAP_ANY)
        self._cap = cv2.VideoCapture(self._device_id, backend)
        if not self._cap.isOpened():
            logger.error("Failed to open camera %d (backend %s)", self._device_id, self._backend)
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._cap.set(cv2.CAP_PROP_FPS, self._fps)
        self._width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or self._width
        self._height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or self._height
        logger.info("Camera %d opened: %dx%d", self._device_id, self._width, self._height)

        if self._threaded:
            self._running = True
            self._thread = threading.Thread(target=self._capture_loop, daemon=True)
            self._thread.start()
        return True

    def _capture_loop(self):
        """Background thread: keep the newest frame."""
        while self._running:
            ret, frame = self._cap.read()
            if not ret or frame is None:
                time.sleep(0.005)
                continue
            with self._lock:
                self._frame = frame
                self._frame_id += 1

    def read(self) -> Tuple[Optional[int], Optional[np.ndarray]]:
        """Latest frame as (frame_id, BGR array), or (None, None)."""
        if self._cap is None:
            return None, None
        if not self._threaded:
            ret, frame = self._cap.read()
            if not ret or frame is None:
                return None, None
            self._frame_id += 1
            return self._frame_id, frame
        with self._lock:
            if self._frame is None:
                return None, None
            return self._frame_id, self._frame.copy()

    @property
    def ready(self) -> bool:
        """True once at least one frame has been captured."""
        return self._frame_id > 0

    @property
    def resolution(self) -> tuple:
        return (self._width, self._height)

    def stop(self):
        """Stop capture and release the device."""
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        if self._cap:
            self._cap.release()
            self._cap = None
        logger.info("Camera stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.stop()
