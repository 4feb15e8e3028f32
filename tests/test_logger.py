"""
Tests for logging helpers
==========================
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.logger import setup_logging, InteractionLogger


class TestSetupLogging:
    """Test suite for setup_logging()."""

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        root = setup_logging(level="DEBUG", log_file=str(log_file))
        try:
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2
            assert log_file.parent.exists()
        finally:
            for handler in list(root.handlers):
                handler.close()
            root.handlers.clear()


class TestInteractionLogger:
    """Test suite for InteractionLogger."""

    def test_history_and_counts(self):
        log = InteractionLogger()
        log.log_phrase("a rose please", 13, "rose")
        log.log_selection("matched", 13, "rose")
        log.log_selection("timed_out", 4, "iris")
        log.log_selection("timed_out", 2, "forget me not")
        assert len(log.get_history()) == 4
        assert log.get_history(1)[0]["label"] == "forget me not"
        assert log.outcome_counts() == {"matched": 1, "timed_out": 2}
