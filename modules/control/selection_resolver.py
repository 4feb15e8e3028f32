"""
Selection resolution: the only writer of the displayed catalogue index.

Matched phrases select their entry. Misses and timeouts fall back to a
uniformly random entry (repeats allowed). Head-nod steps move the index
by one, wrapping around the catalogue.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from core.events import EventBus, Events
from core.types import CatalogueEntry, Outcome, SelectionState, NOT_FOUND

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    "matched": "Showing you {label}.",
    "navigated": "Showing you {label}.",
    "no_match": "No match for that. Showing a random flower.",
    "timed_out": "Did not catch that. Showing a random flower.",
}


class SelectionResolver:
    """Applies match outcomes to the SelectionState and produces feedback."""

    def __init__(self, catalogue: Sequence[CatalogueEntry], config: dict = None,
                 messages: dict = None, event_bus: EventBus = None, rng=None):
        config = config or {}
        if not catalogue:
            raise ValueError("SelectionResolver needs a non-empty catalogue")

        self._catalogue = tuple(catalogue)
        self._random_on_timeout = config.get("random_on_timeout", True)
        self._rng = rng if rng is not None else np.random.default_rng(config.get("seed"))

        self._messages = dict(DEFAULT_MESSAGES)
        self._messages.update(messages or {})

        initial = int(config.get("initial_index", 0))
        self._state = SelectionState(initial % len(self._catalogue))
        self._feedback_message: Optional[str] = None
        self._bus = event_bus
        self._outcome_count = 0

    # =========================================================================
    # Outcomes
    # =========================================================================

    def resolve_match(self, index: int) -> int:
        """Apply a matcher result (catalogue index or NOT_FOUND)."""
        if index == NOT_FOUND:
            return self.resolve_no_match()
        if not 0 <= index < len(self._catalogue):
            raise IndexError(f"Catalogue index {index} out of range")

        self._state.current_index = index
        self._state.last_outcome = Outcome.MATCHED
        self._feedback_message = self._format("matched")
        return self._publish()

    def resolve_no_match(self) -> int:
        self._state.current_index = self._random_index()
        self._state.last_outcome = Outcome.NO_MATCH
        self._feedback_message = self._format("no_match")
        logger.info("No catalogue match, random entry %d", self._state.current_index)
        return self._publish()

    def resolve_timeout(self) -> int:
        if self._random_on_timeout:
            self._state.current_index = self._random_index()
        self._state.last_outcome = Outcome.TIMED_OUT
        self._feedback_message = self._format("timed_out")
        logger.info("Capture timed out, showing entry %d", self._state.current_index)
        return self._publish()

    def step(self, delta: int) -> int:
        """Move the selection by delta entries, wrapping around."""
        size = len(self._catalogue)
        self._state.current_index = (self._state.current_index + delta) % size
        self._state.last_outcome = Outcome.NAVIGATED
        self._feedback_message = self._format("navigated")
        return self._publish()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _random_index(self) -> int:
        return int(self._rng.integers(0, len(self._catalogue)))

    def _format(self, key: str) -> str:
        return self._messages[key].format(label=self.current_entry.primary_label)

    def _publish(self) -> int:
        index = self._state.current_index
        self._outcome_count += 1
        logger.debug("Selection -> %d (%s, %s)", index,
                     self.current_entry.primary_label, self._state.last_outcome.value)
        if self._bus is not None:
            self._bus.emit(Events.SELECTION_CHANGED,
                           index=index,
                           outcome=self._state.last_outcome,
                           message=self._feedback_message)
        return index

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def current_entry(self) -> CatalogueEntry:
        return self._catalogue[self._state.current_index]

    @property
    def last_outcome(self) -> Optional[Outcome]:
        return self._state.last_outcome

    @property
    def feedback_message(self) -> Optional[str]:
        return self._feedback_message

    @property
    def outcome_count(self) -> int:
        """Number of outcomes applied so far; changes even when the message repeats."""
        return self._outcome_count

    @property
    def catalogue_size(self) -> int:
        return len(self._catalogue)
