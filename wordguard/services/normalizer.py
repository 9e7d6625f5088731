"""Normaliser — map loosely-typed word/language/category input onto the
canonical dictionary enumerations.

All default-language / default-category policy lives here; nothing else in
the package hardcodes ``English`` or ``profanity`` as a fallback.
"""

from __future__ import annotations

from collections.abc import Iterable

from wordguard.errors import InvalidWordError
from wordguard.models.dictionary import Category, Language

DEFAULT_LANGUAGE = Language.ENGLISH
DEFAULT_CATEGORY = Category.OTHER
# Plain word lists carry no category column; their entries are profanity.
WORD_LIST_CATEGORY = Category.PROFANITY

_FILIPINO_MARKERS = ("filipino", "tagalog")

# Checked in order; the first keyword found in the input wins.
_CATEGORY_HEURISTICS: tuple[tuple[tuple[str, ...], Category], ...] = (
    (("hate", "harassment"), Category.SLUR),
    (("violence", "threat"), Category.BULLYING),
    (("spam", "misinformation"), Category.OTHER),
)


def normalize_language(value: object) -> Language:
    """Return ``Filipino`` if the input mentions Filipino or Tagalog, else ``English``."""
    if value is None:
        return DEFAULT_LANGUAGE
    lowered = str(value).strip().lower()
    if any(marker in lowered for marker in _FILIPINO_MARKERS):
        return Language.FILIPINO
    return DEFAULT_LANGUAGE


def normalize_category(value: object) -> Category:
    """Map *value* to the closest category, falling back to ``other``."""
    if value is None:
        return DEFAULT_CATEGORY
    lowered = str(value).strip().lower()
    if not lowered:
        return DEFAULT_CATEGORY
    try:
        return Category(lowered)
    except ValueError:
        pass
    for keywords, category in _CATEGORY_HEURISTICS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def normalize_word(value: object) -> str:
    """Trim *value*; raise ``InvalidWordError`` when nothing is left."""
    word = "" if value is None else str(value).strip()
    if not word:
        raise InvalidWordError("word is empty")
    return word


def normalize_variations(values: Iterable[object] | None) -> list[str]:
    """Trim, drop empties and remove exact duplicates, keeping first-seen order."""
    if not values:
        return []
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value is None:
            continue
        variation = str(value).strip()
        if variation and variation not in seen:
            seen.add(variation)
            result.append(variation)
    return result


def identity_key(word: str, language: Language) -> tuple[str, Language]:
    """The (word, language) pair that uniquely identifies a dictionary entry."""
    return (word.strip().lower(), language)
