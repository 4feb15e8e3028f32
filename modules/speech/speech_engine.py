"""
Speech engine adapters.

The controller only needs fire-and-forget start()/stop() requests and an
asynchronous result callback. GoogleSpeechEngine implements that on top of
SpeechRecognition's background listener; results are delivered from the
listener thread, so consumers must hand them over to their own thread.
"""

import logging
from typing import Callable, Optional

import speech_recognition as sr

from core.types import SpeechResult

logger = logging.getLogger(__name__)


class SpeechEngine:
    """Base engine: result callback plumbing and listening flag."""

    def __init__(self):
        self._callback: Optional[Callable[[SpeechResult], None]] = None
        self._listening = False

    def on_result(self, callback: Callable[[SpeechResult], None]):
        """Register the single result consumer."""
        self._callback = callback

    def prepare(self):
        """One-time setup that may block; call before the main loop."""

    def start(self):
        self._listening = True

    def stop(self):
        self._listening = False

    def _deliver(self, result: SpeechResult):
        if self._callback is None:
            logger.debug("Speech result with no consumer: %r", result.text)
            return
        self._callback(result)

    @property
    def is_listening(self) -> bool:
        return self._listening

    def close(self):
        self.stop()


class GoogleSpeechEngine(SpeechEngine):
    """Microphone capture + Google Web Speech recognition."""

    def __init__(self, config: dict = None):
        super().__init__()
        config = config or {}
        self._language = config.get("language", "en-US")
        self._phrase_time_limit = config.get("phrase_time_limit", 8)
        self._ambient_duration = config.get("ambient_duration", 0.5)
        self._device_index = config.get("device_index")

        self._recognizer = sr.Recognizer()
        self._recognizer.energy_threshold = config.get("energy_threshold", 300)
        self._recognizer.dynamic_energy_threshold = config.get("dynamic_energy_threshold", True)
        self._recognizer.pause_threshold = config.get("pause_threshold", 0.6)

        self._stopper = None
        self._calibrated = False

    def prepare(self):
        """Calibrate to ambient noise once, before the main loop runs."""
        if self._calibrated:
            return
        try:
            with sr.Microphone(device_index=self._device_index) as source:
                self._recognizer.adjust_for_ambient_noise(source, duration=self._ambient_duration)
        except (OSError, AttributeError) as e:
            logger.warning("Microphone unavailable for calibration: %s", e)
            return
        self._calibrated = True
        logger.info("Microphone calibrated (energy threshold %.0f)",
                    self._recognizer.energy_threshold)

    def start(self):
        """Begin background listening (no-op if already listening).

        Each listener gets its own Microphone: a stopped listener thread may
        still hold the previous source open for up to phrase_time_limit.
        """
        if self._stopper is not None:
            return
        try:
            microphone = sr.Microphone(device_index=self._device_index)
            self._stopper = self._recognizer.listen_in_background(
                microphone, self._handle_audio,
                phrase_time_limit=self._phrase_time_limit,
            )
        except (OSError, AttributeError) as e:
            # No microphone / no PyAudio: behaves as permanently silent input
            logger.warning("Microphone unavailable: %s", e)
            return
        super().start()
        logger.debug("Speech engine listening")

    def stop(self):
        """Stop background listening without waiting for the listener thread."""
        if self._stopper is not None:
            self._stopper(wait_for_stop=False)
            self._stopper = None
            logger.debug("Speech engine stopped")
        super().stop()

    def _handle_audio(self, recognizer: sr.Recognizer, audio: sr.AudioData):
        """Listener-thread callback: recognize one phrase."""
        try:
            text = recognizer.recognize_google(audio, language=self._language)
        except sr.UnknownValueError:
            logger.debug("Speech was unintelligible")
            return
        except sr.RequestError as e:
            logger.warning("Speech service request failed: %s", e)
            return
        self._deliver(SpeechResult(is_final=True, text=text))


class ScriptedSpeechEngine(SpeechEngine):
    """Engine fed by hand (keyboard demo mode and tests)."""

    def __init__(self):
        super().__init__()
        self.start_count = 0
        self.stop_count = 0

    def start(self):
        self.start_count += 1
        super().start()

    def stop(self):
        self.stop_count += 1
        super().stop()

    def say(self, text: str, is_final: bool = True):
        """Deliver a result as if it had been recognized."""
        self._deliver(SpeechResult(is_final=is_final, text=text))
