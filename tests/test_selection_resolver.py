"""
Tests for Selection Resolver
=============================
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.events import EventBus, Events
from core.types import Outcome, NOT_FOUND
from modules.control.selection_resolver import SelectionResolver
from modules.recognition.catalogue import load_catalogue


class TestSelectionResolver:
    """Test suite for SelectionResolver."""

    @pytest.fixture
    def catalogue(self):
        return load_catalogue()

    @pytest.fixture
    def resolver(self, catalogue):
        return SelectionResolver(catalogue, {"seed": 7})

    def test_initial_state(self, resolver):
        assert resolver.current_index == 0
        assert resolver.last_outcome is None
        assert resolver.feedback_message is None

    def test_match(self, resolver):
        resolver.resolve_match(13)
        assert resolver.current_index == 13
        assert resolver.last_outcome is Outcome.MATCHED
        assert resolver.feedback_message == "Showing you rose."

    def test_repeated_outcome_is_counted(self, resolver):
        assert resolver.outcome_count == 0
        resolver.resolve_match(13)
        message = resolver.feedback_message
        resolver.resolve_match(13)
        assert resolver.feedback_message == message
        assert resolver.outcome_count == 2

    def test_not_found_picks_random(self, resolver):
        resolver.resolve_match(NOT_FOUND)
        assert 0 <= resolver.current_index < 18
        assert resolver.last_outcome is Outcome.NO_MATCH

    def test_timeout_picks_random(self, resolver):
        resolver.resolve_timeout()
        assert 0 <= resolver.current_index < 18
        assert resolver.last_outcome is Outcome.TIMED_OUT

    def test_timeout_and_no_match_messages_differ(self, resolver):
        resolver.resolve_no_match()
        no_match = resolver.feedback_message
        resolver.resolve_timeout()
        assert resolver.feedback_message != no_match

    def test_randomness_visits_several_indices(self, catalogue):
        assert len(catalogue) == 18
        resolver = SelectionResolver(catalogue[:17])
        seen = set()
        for _ in range(1000):
            resolver.resolve_no_match()
            assert 0 <= resolver.current_index < 17
            seen.add(resolver.current_index)
        assert len(seen) > 1

    def test_seed_is_reproducible(self, catalogue):
        a = SelectionResolver(catalogue, {"seed": 3})
        b = SelectionResolver(catalogue, {"seed": 3})
        assert [a.resolve_timeout() for _ in range(20)] == [b.resolve_timeout() for _ in range(20)]

    def test_timeout_can_keep_selection(self, catalogue):
        resolver = SelectionResolver(catalogue, {"random_on_timeout": False})
        resolver.resolve_match(5)
        resolver.resolve_timeout()
        assert resolver.current_index == 5
        assert resolver.last_outcome is Outcome.TIMED_OUT

    def test_injected_rng(self, catalogue):
        resolver = SelectionResolver(catalogue, rng=np.random.default_rng(0))
        assert 0 <= resolver.resolve_no_match() < 18

    def test_step_wraps(self, resolver):
        resolver.step(-1)
        assert resolver.current_index == 17
        assert resolver.last_outcome is Outcome.NAVIGATED
        resolver.step(1)
        assert resolver.current_index == 0

    def test_out_of_range_match_rejected(self, resolver):
        with pytest.raises(IndexError):
            resolver.resolve_match(99)

    def test_custom_messages(self, catalogue):
        resolver = SelectionResolver(catalogue, messages={"matched": "Here is a {label}"})
        resolver.resolve_match(0)
        assert resolver.feedback_message == "Here is a daffodil"

    def test_empty_catalogue_rejected(self):
        with pytest.raises(ValueError):
            SelectionResolver([])

    def test_publishes_selection(self, catalogue):
        bus = EventBus()
        seen = []
        bus.subscribe(Events.SELECTION_CHANGED, lambda **kw: seen.append((kw["index"], kw["outcome"])))
        resolver = SelectionResolver(catalogue, event_bus=bus)
        resolver.resolve_match(2)
        assert seen == [(2, Outcome.MATCHED)]
