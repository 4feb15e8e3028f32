#!/usr/bin/env python3
"""
Flower Mirror - face & voice controlled flower display
Main application entry point.

Open your mouth to start listening, say a flower name, and the display
switches to that flower. Nod to browse.

Usage:
    python main.py                     # Camera + microphone
    python main.py --speech typed      # Type phrases on stdin instead of speaking
    python main.py --config my.yaml    # Alternate configuration
"""

import sys
import os
import signal
import argparse
import logging
import threading

import cv2

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from modules.utils.config import Config
from modules.utils.logger import setup_logging, InteractionLogger
from modules.capture.camera_manager import CameraManager
from modules.detection.face_detector import FaceDetector
from modules.recognition.catalogue import load_catalogue
from modules.speech.speech_engine import GoogleSpeechEngine, ScriptedSpeechEngine
from modules.visualization.status_overlay import StatusOverlay

from core.events import EventBus, Events
from core.controller import InteractionController

logger = logging.getLogger(__name__)


class FlowerMirror:
    """Main application wiring camera, face mesh, speech and controller."""

    def __init__(self, config: Config, speech_mode: str = "mic"):
        self._config = config
        self._running = False

        self._bus = EventBus()
        self._camera = CameraManager(config.camera)
        self._detector = FaceDetector(config.face_mesh)

        if speech_mode == "typed":
            self._engine = ScriptedSpeechEngine()
        else:
            self._engine = GoogleSpeechEngine(config.speech)
        self._speech_mode = speech_mode

        self._catalogue = load_catalogue(data=config.catalogue)
        self._interaction_logger = InteractionLogger()
        self._controller = InteractionController(
            self._catalogue,
            self._engine,
            config={
                "landmarks": config.landmarks,
                "gesture": config.gesture,
                "capture": config.capture,
                "navigation": config.navigation,
                "resolver": config.resolver,
                "feedback": config.feedback,
            },
            event_bus=self._bus,
            interaction_logger=self._interaction_logger,
        )
        self._overlay = StatusOverlay(config.visualization)

        self._bus.subscribe(Events.CAPTURE_STARTED, self._on_capture_started)
        logger.info("FlowerMirror initialized (speech=%s)", speech_mode)

    def _on_capture_started(self, **kwargs):
        if self._speech_mode == "typed":
            print("Listening... type a phrase and press Enter:", flush=True)

    def _read_typed_phrases(self):
        """stdin reader for --speech typed."""
        for line in sys.stdin:
            line = line.strip()
            if line:
                self._engine.say(line)

    def start(self) -> bool:
        """Run until 'q' or a signal."""
        if not self._camera.open():
            logger.error("Camera unavailable, showing status only")

        self._detector.initialize()
        self._engine.prepare()
        if self._speech_mode == "typed":
            threading.Thread(target=self._read_typed_phrases, daemon=True).start()

        self._running = True
        self._bus.emit(Events.SYSTEM_STARTED)
        try:
            self._run_main_loop()
        finally:
            self._shutdown()
        return True

    def _run_main_loop(self):
        window_name = self._config.get("visualization.window_name", "Flower Mirror")
        show_window = self._config.get("visualization.enabled", True)
        mirror = self._config.get("landmarks.mirror", True)

        while self._running:
            _, frame = self._camera.read()
            keypoints = None
            if frame is not None:
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                keypoints = self._detector.detect(rgb)

            self._controller.tick(keypoints, camera_ready=frame is not None)

            if show_window:
                if frame is None:
                    frame = self._overlay.canvas(*self._camera.resolution)
                else:
                    if self._config.get("visualization.show_landmarks", False):
                        frame = self._detector.draw_landmarks(frame)
                    if mirror:
                        frame = cv2.flip(frame, 1)
                frame = self._overlay.render(frame, self._controller.build_state())
                cv2.imshow(window_name, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                self._running = False

    def _shutdown(self):
        logger.info("Shutting down...")
        self._running = False
        self._controller.shutdown()
        self._engine.close()
        self._camera.stop()
        self._detector.close()
        cv2.destroyAllWindows()

        counts = self._interaction_logger.outcome_counts()
        if counts:
            logger.info("Session outcomes: %s", counts)
        logger.info("Shutdown complete.")

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Flower Mirror - face & voice controlled flower display"
    )
    parser.add_argument(
        "--speech", choices=["mic", "typed"], default="mic",
        help="Speech source: microphone or phrases typed on stdin"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--catalogue", type=str, default=None, help="Path to catalogue.yaml")
    parser.add_argument("--camera", type=int, default=None, help="Camera device ID")
    parser.add_argument("--seed", type=int, default=None, help="Seed for random fallback picks")
    parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING...")
    return parser.parse_args(argv)


def main():
    args = parse_args()

    config = Config()
    config.load(config_path=args.config, catalogue_path=args.catalogue)

    overrides = {}
    if args.camera is not None:
        overrides.setdefault("camera", {})["device_id"] = args.camera
    if args.seed is not None:
        overrides.setdefault("resolver", {})["seed"] = args.seed
    if args.log_level is not None:
        overrides.setdefault("logging", {})["level"] = args.log_level
    config.override(overrides)

    log_cfg = config.get_section("logging")
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  FLOWER MIRROR")
    logger.info("  Speech: %s", args.speech)
    logger.info("=" * 60)

    app = FlowerMirror(config, speech_mode=args.speech)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    app.start()


if __name__ == "__main__":
    main()
