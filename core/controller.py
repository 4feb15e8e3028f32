"""
Interaction controller: composes the face -> gesture -> voice -> selection
cycle and owns all interaction state for the session.

Architecture:
    LandmarkSampler -> geometry.measure -> GestureDebouncer
    -> VoiceCaptureController -> (speech engine) -> PhraseMatcher
    -> SelectionResolver

Everything runs on the thread that calls tick(). Speech results may be
posted from any thread; they are queued and applied at the start of the
next tick, so a tick never observes a half-applied result.
"""

import time
import queue
import logging
from typing import Callable, Optional, Sequence

import numpy as np

from core.events import EventBus, Events
from core.types import CatalogueEntry, GestureEvent, Measurements, SpeechResult
from modules.detection import geometry
from modules.detection.landmark_sampler import LandmarkSampler
from modules.control.gesture_debouncer import GestureDebouncer
from modules.control.voice_capture import VoiceCaptureController
from modules.control.selection_resolver import SelectionResolver
from modules.control.nod_navigator import NodNavigator
from modules.recognition.phrase_matcher import PhraseMatcher

logger = logging.getLogger(__name__)

DEFAULT_STATUS = {
    "starting": "Starting camera...",
    "show_face": "Show your face to start tracking.",
    "listening": "Listening! Tell me a flower you want to see.",
    "idle": "Open mouth to activate voice recognition.",
}


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class TickResult:
    """Result of a single controller tick."""

    __slots__ = (
        "timestamp", "face_detected", "measurements", "gesture_event",
        "nod_step", "results_applied", "current_index", "status_message",
    )

    def __init__(self, timestamp: float):
        self.timestamp = timestamp
        self.face_detected = False
        self.measurements: Measurements = Measurements()
        self.gesture_event: Optional[GestureEvent] = None
        self.nod_step = 0
        self.results_applied = 0
        self.current_index = 0
        self.status_message = ""


class InteractionController:
    """Single-session multi-modal interaction controller."""

    def __init__(
        self,
        catalogue: Sequence[CatalogueEntry],
        engine,
        config: dict = None,
        event_bus: EventBus = None,
        interaction_logger=None,
        rng=None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        config = config or {}
        self._catalogue = tuple(catalogue)
        self._bus = event_bus or EventBus()
        self._clock = clock
        self._engine = engine
        self._interaction_logger = interaction_logger

        feedback = config.get("feedback") or {}
        self._status_texts = dict(DEFAULT_STATUS)
        self._status_texts.update({k: v for k, v in feedback.items() if k in DEFAULT_STATUS})

        # Components
        self._sampler = LandmarkSampler(config.get("landmarks"))
        self._debouncer = GestureDebouncer(config.get("gesture"), event_bus=self._bus)
        capture_config = dict(config.get("capture") or {})
        capture_config.setdefault(
            "max_capture_ms", (config.get("gesture") or {}).get("max_open_ms", 10000))
        self._capture = VoiceCaptureController(engine, capture_config, event_bus=self._bus)
        self._matcher = PhraseMatcher(self._catalogue)
        self._resolver = SelectionResolver(
            self._catalogue, config.get("resolver"),
            messages=feedback, event_bus=self._bus, rng=rng,
        )
        self._navigator = NodNavigator(config.get("navigation"))

        # Speech results arrive on the engine's thread
        self._inbox = queue.Queue()
        engine.on_result(self.post_result)

        self._bus.subscribe(Events.PHRASE_CAPTURED, self._on_phrase_captured)
        self._bus.subscribe(Events.CAPTURE_TIMED_OUT, self._on_capture_timed_out)
        self._bus.subscribe(Events.SELECTION_CHANGED, self._on_selection_changed)

        # Exposed state
        self._camera_ready = False
        self._face_detected = False
        self._measurements = Measurements()
        self._head_angle: Optional[float] = None
        self._status_message = self._status_texts["starting"]
        self._tick_count = 0

        logger.info("InteractionController ready (%d catalogue entries)", len(self._catalogue))

    # =========================================================================
    # Inputs
    # =========================================================================

    def tick(self, keypoints: Optional[np.ndarray], now_ms: float = None,
             camera_ready: bool = True) -> TickResult:
        """Run one frame of the interaction cycle.

        Args:
            keypoints: Normalized landmark array for the tracked face, or None
            now_ms: Current monotonic time in ms (defaults to the clock)
            camera_ready: False while the camera has not produced frames

        Returns:
            TickResult for this frame
        """
        now = self._clock() if now_ms is None else now_ms
        result = TickResult(now)
        self._tick_count += 1

        # --- 1. Apply speech results received since the last tick ---
        result.results_applied = self._drain_inbox(now)

        # --- 2. Sample landmarks ---
        self._camera_ready = camera_ready
        face = self._sampler.sample(keypoints if camera_ready else None)
        previous_nose = self._sampler.advance(face)
        self._set_face_detected(face is not None)
        result.face_detected = face is not None

        # --- 3. Measure ---
        measurements = geometry.measure(face, previous_nose)
        self._measurements = measurements
        result.measurements = measurements
        if measurements.eye_angle is not None:
            self._head_angle = measurements.eye_angle

        # --- 4. Gesture edges (capture window reacts via the bus), capture expiry ---
        result.gesture_event = self._debouncer.update(measurements.mouth_gap, now)
        self._capture.expire(now)

        # --- 5. Head-nod browsing ---
        if face is not None:
            busy = self._debouncer.is_open or self._capture.is_active
            step = self._navigator.update(measurements.nose_velocity, busy, now)
            if step:
                self._resolver.step(step)
                result.nod_step = step

        self._status_message = self._compute_status()
        result.current_index = self._resolver.current_index
        result.status_message = self._status_message
        return result

    def post_result(self, result: SpeechResult):
        """Queue a speech result. Safe to call from any thread."""
        self._inbox.put(result)

    def handle_result(self, result: SpeechResult, now_ms: float = None) -> Optional[str]:
        """Apply a speech result immediately (caller's thread must own the controller)."""
        now = self._clock() if now_ms is None else now_ms
        return self._capture.handle_result(result, now)

    def _drain_inbox(self, now: float) -> int:
        applied = 0
        while True:
            try:
                result = self._inbox.get_nowait()
            except queue.Empty:
                return applied
            self._capture.handle_result(result, now)
            applied += 1

    # =========================================================================
    # Event listeners
    # =========================================================================

    def _on_phrase_captured(self, text: str, **kwargs):
        index = self._matcher.match(text)
        if self._interaction_logger is not None:
            label = self._catalogue[index].primary_label if index >= 0 else None
            self._interaction_logger.log_phrase(text, index, label)
        self._resolver.resolve_match(index)

    def _on_capture_timed_out(self, **kwargs):
        self._resolver.resolve_timeout()

    def _on_selection_changed(self, index: int, outcome, **kwargs):
        if self._interaction_logger is not None:
            self._interaction_logger.log_selection(
                outcome.value, index, self._catalogue[index].primary_label)

    def _set_face_detected(self, detected: bool):
        if detected == self._face_detected:
            return
        self._face_detected = detected
        self._bus.emit(Events.FACE_FOUND if detected else Events.FACE_LOST)

    def _compute_status(self) -> str:
        if not self._camera_ready:
            return self._status_texts["starting"]
        if not self._face_detected:
            return self._status_texts["show_face"]
        if self._capture.is_active:
            return self._status_texts["listening"]
        return self._status_texts["idle"]

    # =========================================================================
    # Exposed state (read-only)
    # =========================================================================

    @property
    def current_index(self) -> int:
        return self._resolver.current_index

    @property
    def current_entry(self) -> CatalogueEntry:
        return self._resolver.current_entry

    @property
    def gesture_is_open(self) -> bool:
        return self._debouncer.is_open

    @property
    def capture_active(self) -> bool:
        return self._capture.is_active

    @property
    def feedback_message(self) -> Optional[str]:
        return self._resolver.feedback_message

    @property
    def status_message(self) -> str:
        return self._status_message

    @property
    def last_outcome(self):
        return self._resolver.last_outcome

    @property
    def gesture_state(self):
        return self._debouncer.state

    @property
    def capture_window(self):
        return self._capture.window

    @property
    def head_angle(self) -> Optional[float]:
        return self._head_angle

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def catalogue(self) -> tuple:
        return self._catalogue

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def build_state(self) -> dict:
        """State dict for renderers."""
        entry = self._resolver.current_entry
        outcome = self._resolver.last_outcome
        return {
            "current_index": self._resolver.current_index,
            "current_label": entry.primary_label,
            "current_asset": entry.asset,
            "gesture_is_open": self._debouncer.is_open,
            "capture_active": self._capture.is_active,
            "feedback_message": self._resolver.feedback_message,
            "status_message": self._status_message,
            "last_outcome": outcome.value if outcome else None,
            "outcome_count": self._resolver.outcome_count,
            "camera_ready": self._camera_ready,
            "face_detected": self._face_detected,
            "mouth_gap": self._measurements.mouth_gap,
            "head_angle": self._head_angle,
        }

    def shutdown(self):
        """Stop any capture in progress."""
        self._capture.reset()
        self._bus.emit(Events.SYSTEM_SHUTDOWN)
