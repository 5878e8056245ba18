"""Fixed two-way mapping between mood symbols and their 1-6 scores."""

from __future__ import annotations

from types import MappingProxyType

from moodmemo.constants import MOOD_CHOICES

MOOD_SYMBOLS: tuple[str, ...] = tuple(symbol for symbol, _ in MOOD_CHOICES)
SCORE_BY_SYMBOL = MappingProxyType(dict(MOOD_CHOICES))
SYMBOL_BY_SCORE = MappingProxyType({score: symbol for symbol, score in MOOD_CHOICES})

MIN_SCORE = min(SYMBOL_BY_SCORE)
MAX_SCORE = max(SYMBOL_BY_SCORE)


def score_of(symbol: object) -> int | None:
    """Score for a palette symbol, or None for anything else."""
    if not isinstance(symbol, str):
        return None
    return SCORE_BY_SYMBOL.get(symbol.strip())


def symbol_of(score: object) -> str | None:
    """Palette symbol for an integer score, or None when out of range."""
    if isinstance(score, bool) or not isinstance(score, int):
        return None
    return SYMBOL_BY_SCORE.get(score)


def is_mood_symbol(symbol: object) -> bool:
    return score_of(symbol) is not None
