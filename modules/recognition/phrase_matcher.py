"""
Ordered-subsequence phrase matching against the catalogue.

A synonym matches an utterance when all of its words appear in the
utterance, in the same order, with any number of filler words between
them. Entries are scanned in catalogue order and the first match wins.

    "I would like to see a rose please"  ->  matches "rose"
    "sharon rose"                        ->  does not match "rose of sharon"
"""

import re
import logging
from typing import List, Sequence

from core.types import CatalogueEntry, NOT_FOUND

logger = logging.getLogger(__name__)

# Whitespace plus: + - _ ` ' . ? !
_WORD_SEPARATORS = re.compile(r"[\s+\-_`'.?!]+")


def tokenize(text: str) -> List[str]:
    """Split text into lower-cased words, dropping empty fragments."""
    if not text:
        return []
    return [token.lower() for token in _WORD_SEPARATORS.split(text) if token]


def contains_in_order(tokens: Sequence[str], words: Sequence[str]) -> bool:
    """True when every word occurs in tokens, in order, gaps allowed."""
    if not words:
        return False
    position = 0
    for word in words:
        try:
            position = tokens.index(word, position) + 1
        except ValueError:
            return False
    return True


class PhraseMatcher:
    """Matches recognized utterances to catalogue indices."""

    def __init__(self, catalogue: Sequence[CatalogueEntry]):
        self._catalogue = tuple(catalogue)
        # Synonym words are immutable; split them once
        self._synonym_words = [
            [tokenize(synonym) for synonym in entry.synonyms]
            for entry in self._catalogue
        ]

    def match(self, utterance: str) -> int:
        """Find the first catalogue entry named in the utterance.

        Returns:
            Catalogue index, or NOT_FOUND
        """
        tokens = tokenize(utterance)
        logger.debug("Utterance tokens: %s", tokens)
        if not tokens:
            return NOT_FOUND

        for index, synonyms in enumerate(self._synonym_words):
            for words in synonyms:
                if contains_in_order(tokens, words):
                    logger.debug("Matched %r -> entry %d (%s)",
                                 " ".join(words), index, self._catalogue[index].primary_label)
                    return index

        logger.debug("No catalogue entry matched %r", utterance)
        return NOT_FOUND

    @property
    def catalogue(self) -> tuple:
        return self._catalogue


def match(utterance: str, catalogue: Sequence[CatalogueEntry]) -> int:
    """One-shot form of PhraseMatcher.match()."""
    return PhraseMatcher(catalogue).match(utterance)
