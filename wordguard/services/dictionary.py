"""Single-word dictionary operations and read-side views.

Write helpers go through the store gateway; the read helpers are pure
functions over an entry list so routers can fetch once and derive several
views from it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from wordguard.models.dictionary import (
    Category,
    CategoryStats,
    DetectionWord,
    Language,
    LanguageStats,
    WordCreate,
    WordEntry,
    WordPage,
    WordUpdate,
)
from wordguard.services.normalizer import (
    identity_key,
    normalize_category,
    normalize_language,
    normalize_variations,
    normalize_word,
)
from wordguard.services.store import DictionaryStore, WordId

logger = logging.getLogger(__name__)


async def add_word(store: DictionaryStore, payload: WordCreate) -> tuple[WordEntry, bool]:
    """Add a word, or merge new variations into the entry that already has its identity.

    Returns the stored entry and whether it was newly created.
    """
    word = normalize_word(payload.word)
    language = normalize_language(payload.language)
    category = normalize_category(payload.category)
    variations = normalize_variations(payload.variations)
    key = identity_key(word, language)

    existing = next((e for e in await store.fetch_all() if e.identity == key), None)
    if existing is None:
        entry = WordEntry(
            word=word,
            language=language,
            category=category,
            variations=variations,
            source=payload.source,
        )
        created = await store.insert(entry)
        logger.info("Word added to dictionary: %r (%s, %s)", word, language, category)
        return created, True

    new_variations = [v for v in variations if v not in existing.variations]
    if not new_variations:
        return existing, False
    merged = existing.model_copy(update={"variations": existing.variations + new_variations})
    updated = await store.update(existing.id, merged)
    logger.info("Merged %d variation(s) into existing word %r", len(new_variations), existing.word)
    return updated, False


async def update_word(store: DictionaryStore, word_id: WordId, patch: WordUpdate) -> WordEntry:
    current = await store.get(word_id)
    changes: dict[str, object] = {}
    if patch.word is not None:
        changes["word"] = normalize_word(patch.word)
    if patch.language is not None:
        changes["language"] = normalize_language(patch.language)
    if patch.category is not None:
        changes["category"] = normalize_category(patch.category)
    if patch.variations is not None:
        changes["variations"] = normalize_variations(patch.variations)
    updated = await store.update(word_id, current.model_copy(update=changes))
    logger.info("Word %s updated", word_id)
    return updated


async def set_word_status(store: DictionaryStore, word_id: WordId, is_active: bool) -> WordEntry:
    current = await store.get(word_id)
    updated = await store.update(word_id, current.model_copy(update={"is_active": is_active}))
    logger.info("Word %r %s", updated.word, "activated" if is_active else "deactivated")
    return updated


async def replace_variations(store: DictionaryStore, word_id: WordId, variations: list[str]) -> WordEntry:
    current = await store.get(word_id)
    updated = await store.update(
        word_id, current.model_copy(update={"variations": normalize_variations(variations)})
    )
    logger.info("Variations for %r replaced (%d)", updated.word, len(updated.variations))
    return updated


async def delete_word(store: DictionaryStore, word_id: WordId) -> None:
    await store.delete(word_id)
    logger.info("Word %s deleted from dictionary", word_id)


def list_words(
    entries: Sequence[WordEntry],
    page: int = 1,
    limit: int = 100,
    language: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> WordPage:
    """Flat, filtered, paginated listing for the master word list."""
    wanted_language = normalize_language(language) if language else None
    wanted_category = normalize_category(category) if category else None
    term = search.strip().lower() if search and search.strip() else None

    matched = [
        e
        for e in entries
        if (wanted_language is None or e.language == wanted_language)
        and (wanted_category is None or e.category == wanted_category)
        and (term is None or term in e.word.lower())
    ]
    start = (page - 1) * limit
    return WordPage(
        words=matched[start : start + limit],
        page=page,
        limit=limit,
        total=len(matched),
        total_pages=math.ceil(len(matched) / limit) if limit else 0,
    )


def search_words(entries: Sequence[WordEntry], term: str, language: str) -> list[WordEntry]:
    """Active entries in *language* whose word or a variation contains *term*."""
    needle = term.strip().lower()
    wanted = normalize_language(language)
    return [
        e
        for e in entries
        if e.is_active
        and e.language == wanted
        and (needle in e.word.lower() or any(needle in v.lower() for v in e.variations))
    ]


def detection_words(entries: Sequence[WordEntry], language: str) -> list[DetectionWord]:
    """Every active word and variation in *language*, flattened for matching clients."""
    wanted = normalize_language(language)
    words: list[DetectionWord] = []
    for entry in entries:
        if not entry.is_active or entry.language != wanted:
            continue
        words.append(DetectionWord(word=entry.word, category=entry.category))
        words.extend(
            DetectionWord(word=v, category=entry.category, is_variation=True, original_word=entry.word)
            for v in entry.variations
        )
    return words


def dictionary_stats(entries: Sequence[WordEntry]) -> list[LanguageStats]:
    """Word and detection counts per language, broken down by category."""
    stats: list[LanguageStats] = []
    for language in Language:
        in_language = [e for e in entries if e.language == language]
        if not in_language:
            continue
        categories = []
        for category in Category:
            in_category = [e for e in in_language if e.category == category]
            if in_category:
                categories.append(
                    CategoryStats(
                        category=category,
                        count=len(in_category),
                        total_detections=sum(e.detection_count for e in in_category),
                    )
                )
        stats.append(
            LanguageStats(
                language=language,
                total_words=len(in_language),
                total_detections=sum(e.detection_count for e in in_language),
                categories=categories,
            )
        )
    return stats

