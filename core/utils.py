"""Utility functions for tiempo application."""

import re
import unicodedata

PLACEHOLDER = '___'

_WORD_RE = re.compile(r'\w+')


def normalize_sentence(sentence: str) -> str:
    """NFC-normalize and trim a player sentence."""
    return unicodedata.normalize('NFC', sentence or '').strip()


def tokenize(sentence: str) -> list[str]:
    """Lower-cased word tokens; punctuation and whitespace are separators."""
    return _WORD_RE.findall(normalize_sentence(sentence).lower())


def phrase_tokens(phrase: str) -> list[str]:
    """Split a lexicon phrase into tokens, keeping '___' placeholders intact."""
    return unicodedata.normalize('NFC', phrase).lower().split()


def count_words(sentence: str) -> int:
    """Whitespace-separated word count, punctuation included."""
    return len(normalize_sentence(sentence).split())


def _matches_at(tokens: list[str], pattern: list[str], start: int) -> bool:
    if start + len(pattern) > len(tokens):
        return False
    for offset, expected in enumerate(pattern):
        if expected != PLACEHOLDER and tokens[start + offset] != expected:
            return False
    return True


def contains_phrase(tokens: list[str], phrase: str) -> bool:
    """True if the phrase occurs as a contiguous token run.

    A '___' placeholder in the phrase matches any single token.
    """
    pattern = phrase_tokens(phrase)
    if not pattern:
        return False
    return any(_matches_at(tokens, pattern, i) for i in range(len(tokens)))


def count_phrases(tokens: list[str], phrases: list[str]) -> int:
    """Count non-overlapping phrase occurrences, scanning left to right.

    At each position the longest matching phrase wins, so 'pasado mañana'
    counts once rather than also counting 'mañana'.
    """
    patterns = sorted((phrase_tokens(p) for p in phrases), key=len, reverse=True)
    count = 0
    i = 0
    while i < len(tokens):
        for pattern in patterns:
            if pattern and _matches_at(tokens, pattern, i):
                count += 1
                i += len(pattern)
                break
        else:
            i += 1
    return count


def followed_by(tokens: list[str], first: set, second: set) -> bool:
    """True if a token from `first` is immediately followed by one from `second`."""
    return any(a in first and b in second for a, b in zip(tokens, tokens[1:]))
