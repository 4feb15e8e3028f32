"""
Logging setup and interaction outcome logging.
"""

import os
import logging
import logging.handlers
import time


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure application logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class InteractionLogger:
    """Records what each capture window ended with."""

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("interaction_events")
        self._history = []
        self._max_history = max_history

    def log_phrase(self, text, index, label):
        """Log a recognized phrase and where it led."""
        self._record("phrase", text=text, index=index, label=label)
        self.logger.info("Phrase: %-30r | Entry: %2d | %s", text, index, label)

    def log_selection(self, outcome, index, label):
        """Log a selection change."""
        self._record("selection", outcome=outcome, index=index, label=label)
        self.logger.info("Selection: %-10s | Entry: %2d | %s", outcome, index, label)

    def _record(self, kind, **data):
        entry = {"timestamp": time.time(), "kind": kind}
        entry.update(data)
        self._history.append(entry)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    def get_history(self, last_n=None):
        """Get recent interaction history."""
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    def outcome_counts(self) -> dict:
        """Selection outcomes tallied by name."""
        counts = {}
        for entry in self._history:
            if entry["kind"] == "selection":
                counts[entry["outcome"]] = counts.get(entry["outcome"], 0) + 1
        return counts
