"""
Tests for Speech Engine adapters
=================================
"""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import speech_recognition as sr

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.types import SpeechResult
from modules.speech.speech_engine import GoogleSpeechEngine, ScriptedSpeechEngine


class TestScriptedSpeechEngine:
    """Test suite for ScriptedSpeechEngine."""

    def test_say_delivers_result(self):
        engine = ScriptedSpeechEngine()
        results = []
        engine.on_result(results.append)
        engine.say("a tulip")
        assert results == [SpeechResult(True, "a tulip")]

    def test_say_without_consumer(self):
        ScriptedSpeechEngine().say("nobody listening")

    def test_start_stop_counts(self):
        engine = ScriptedSpeechEngine()
        engine.start()
        assert engine.is_listening
        engine.stop()
        assert not engine.is_listening
        assert (engine.start_count, engine.stop_count) == (1, 1)


class TestGoogleSpeechEngine:
    """Test suite for GoogleSpeechEngine (no microphone needed)."""

    @pytest.fixture
    def results(self):
        return []

    @pytest.fixture
    def engine(self, results):
        engine = GoogleSpeechEngine({"language": "en-GB"})
        engine.on_result(results.append)
        return engine

    def test_recognized_phrase_is_final(self, engine, results):
        recognizer = Mock()
        recognizer.recognize_google.return_value = "show me a poppy"
        engine._handle_audio(recognizer, Mock())
        assert results == [SpeechResult(True, "show me a poppy")]
        assert recognizer.recognize_google.call_args.kwargs["language"] == "en-GB"

    def test_unintelligible_audio_is_dropped(self, engine, results):
        recognizer = Mock()
        recognizer.recognize_google.side_effect = sr.UnknownValueError()
        engine._handle_audio(recognizer, Mock())
        assert results == []

    def test_request_error_is_dropped(self, engine, results):
        recognizer = Mock()
        recognizer.recognize_google.side_effect = sr.RequestError("offline")
        engine._handle_audio(recognizer, Mock())
        assert results == []

    def test_missing_microphone_is_not_fatal(self, engine, results):
        with patch("modules.speech.speech_engine.sr.Microphone", side_effect=OSError("no device")):
            engine.start()
        assert not engine.is_listening

    def test_start_and_stop_background_listener(self, engine, results):
        stopper = Mock()
        with patch("modules.speech.speech_engine.sr.Microphone") as microphone:
            microphone.return_value.__enter__ = Mock(return_value=Mock())
            microphone.return_value.__exit__ = Mock(return_value=False)
            with patch.object(engine._recognizer, "adjust_for_ambient_noise"), \
                    patch.object(engine._recognizer, "listen_in_background", return_value=stopper) as listen:
                engine.start()
                engine.start()
                assert listen.call_count == 1
        assert engine.is_listening
        engine.stop()
        stopper.assert_called_once_with(wait_for_stop=False)
        assert not engine.is_listening

    def test_restart_uses_fresh_microphone(self, engine):
        sources = []

        def listen(source, callback, phrase_time_limit=None):
            sources.append(source)
            return Mock()

        with patch("modules.speech.speech_engine.sr.Microphone",
                   side_effect=lambda device_index=None: Mock()), \
                patch.object(engine._recognizer, "listen_in_background", side_effect=listen):
            engine.start()
            engine.stop()
            engine.start()
        assert len(sources) == 2
        assert sources[0] is not sources[1]

    def test_start_does_not_calibrate(self, engine):
        with patch("modules.speech.speech_engine.sr.Microphone"), \
                patch.object(engine._recognizer, "adjust_for_ambient_noise") as adjust, \
                patch.object(engine._recognizer, "listen_in_background", return_value=Mock()):
            engine.start()
        adjust.assert_not_called()

    def test_prepare_calibrates_once(self, engine):
        with patch("modules.speech.speech_engine.sr.Microphone") as microphone, \
                patch.object(engine._recognizer, "adjust_for_ambient_noise") as adjust:
            microphone.return_value.__enter__ = Mock(return_value=Mock())
            microphone.return_value.__exit__ = Mock(return_value=False)
            engine.prepare()
            engine.prepare()
        assert adjust.call_count == 1

    def test_prepare_without_microphone(self, engine):
        with patch("modules.speech.speech_engine.sr.Microphone", side_effect=OSError("no device")):
            engine.prepare()
        assert not engine.is_listening
