"""
Tests for Phrase Matcher
=========================
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.types import CatalogueEntry, NOT_FOUND
from modules.recognition.catalogue import load_catalogue
from modules.recognition.phrase_matcher import PhraseMatcher, tokenize, contains_in_order, match


def entry(*synonyms):
    return CatalogueEntry(primary_label=synonyms[0], synonyms=tuple(synonyms))


class TestTokenize:
    """Test suite for tokenize()."""

    def test_whitespace_and_case(self):
        assert tokenize("  Show me   A Rose ") == ["show", "me", "a", "rose"]

    def test_punctuation_separators(self):
        assert tokenize("ox-eye_daisy`s it's.rose?yes!+no") == [
            "ox", "eye", "daisy", "s", "it", "s", "rose", "yes", "no",
        ]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize(" -- ") == []


class TestContainsInOrder:
    """Test suite for ordered-subsequence check."""

    def test_gaps_allowed(self):
        assert contains_in_order(["rose", "of", "the", "sharon"], ["rose", "sharon"])

    def test_order_matters(self):
        assert not contains_in_order(["sharon", "rose"], ["rose", "sharon"])

    def test_repeated_word_needs_two_tokens(self):
        assert not contains_in_order(["lily"], ["lily", "lily"])
        assert contains_in_order(["lily", "x", "lily"], ["lily", "lily"])

    def test_empty_words_never_match(self):
        assert not contains_in_order(["rose"], [])


class TestPhraseMatcher:
    """Test suite for PhraseMatcher."""

    @pytest.fixture
    def flowers(self):
        return load_catalogue(data=None)

    @pytest.fixture
    def matcher(self, flowers):
        return PhraseMatcher(flowers)

    def label_of(self, flowers, index):
        return flowers[index].primary_label

    def test_filler_words(self, matcher, flowers):
        index = matcher.match("I would like to see a rose please")
        assert self.label_of(flowers, index) == "rose"

    def test_partial_multiword_synonym(self):
        matcher = PhraseMatcher([entry("hibiscus", "rose of sharon")])
        assert matcher.match("rose garden") == NOT_FOUND

    def test_multiword_order_sensitive(self):
        matcher = PhraseMatcher([entry("hibiscus", "rose of sharon")])
        assert matcher.match("sharon rose") == NOT_FOUND
        assert matcher.match("the rose of old sharon") == 0

    def test_case_insensitive(self, matcher, flowers):
        assert self.label_of(flowers, matcher.match("TULIP!")) == "tulip"

    def test_synonym_selects_entry(self, matcher, flowers):
        assert self.label_of(flowers, matcher.match("show me some helianthus")) == "sunflower"

    def test_hyphenated_synonym(self, matcher, flowers):
        assert self.label_of(flowers, matcher.match("an ox-eye please")) == "daisy"
        assert self.label_of(flowers, matcher.match("an ox eye please")) == "daisy"

    def test_first_match_wins(self):
        catalogue = [entry("lily", "water lily"), entry("lotus", "water lily")]
        assert PhraseMatcher(catalogue).match("water lily") == 0

    def test_catalogue_order_beats_utterance_order(self, matcher, flowers):
        # "rose of sharon" (hibiscus) is earlier in the catalogue than "rose"
        index = matcher.match("rose of sharon")
        assert self.label_of(flowers, index) == "hibiscus"

    def test_no_match(self, matcher):
        assert matcher.match("nothing to see here") == NOT_FOUND

    def test_empty_utterance(self, matcher):
        assert matcher.match("") == NOT_FOUND

    def test_substring_of_word_is_not_a_match(self):
        matcher = PhraseMatcher([entry("rose")])
        assert matcher.match("roses") == NOT_FOUND

    def test_module_level_match(self):
        assert match("a daisy", [entry("tulip"), entry("daisy")]) == 1
