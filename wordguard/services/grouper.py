"""Synonym / variation grouping for the dictionary browser.

Groups are derived from the flat entry list on every read and never stored.
Only entries that have variations are shown as groups; an entry without
variations is simply not displayed here, it is not deleted. Edits and
deletes go straight back to the single underlying entry.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from wordguard.config import settings
from wordguard.errors import PageOutOfRangeError
from wordguard.models.dictionary import GroupEdit, GroupPage, WordEntry, WordGroup
from wordguard.services.normalizer import (
    normalize_category,
    normalize_language,
    normalize_variations,
    normalize_word,
)
from wordguard.services.store import DictionaryStore, WordId

logger = logging.getLogger(__name__)

_NO_FILTER = ("", "all")


def build_groups(entries: Iterable[WordEntry]) -> list[WordGroup]:
    """One group per entry that has variations, ordered by main word."""
    groups = [
        WordGroup(
            id=entry.id,
            main_word=entry.word,
            language=entry.language,
            category=entry.category,
            variations=list(entry.variations),
            word_count=1 + len(entry.variations),
        )
        for entry in entries
        if entry.variations
    ]
    groups.sort(key=lambda g: (g.main_word.lower(), g.language))
    return groups


def _is_unset(value: str | None) -> bool:
    return value is None or value.strip().lower() in _NO_FILTER


def filter_groups(
    groups: Iterable[WordGroup],
    search: str | None = None,
    language: str | None = None,
    category: str | None = None,
) -> list[WordGroup]:
    """Keep groups matching the search term and the language/category filters.

    The search term matches case-insensitively anywhere in the main word or
    in any variation.
    """
    term = search.strip().lower() if search and search.strip() else None
    wanted_language = None if _is_unset(language) else normalize_language(language)
    wanted_category = None if _is_unset(category) else normalize_category(category)

    def matches(group: WordGroup) -> bool:
        if wanted_language is not None and group.language != wanted_language:
            return False
        if wanted_category is not None and group.category != wanted_category:
            return False
        if term is None:
            return True
        return term in group.main_word.lower() or any(term in v.lower() for v in group.variations)

    return [g for g in groups if matches(g)]


def paginate(
    groups: Sequence[WordGroup],
    page: int = 1,
    page_size: int | None = None,
    *,
    total_words: int = 0,
) -> GroupPage:
    """Return the 1-indexed *page* of *groups*.

    Asking for a page past the end of a non-empty sequence is an error; an
    empty sequence has a single empty first page.
    """
    size = page_size or settings.default_page_size
    if size < 1:
        raise ValueError("page_size must be positive")
    total_pages = math.ceil(len(groups) / size)
    if page < 1 or (total_pages and page > total_pages) or (not total_pages and page != 1):
        raise PageOutOfRangeError(page, total_pages)

    start = (page - 1) * size
    return GroupPage(
        groups=list(groups[start : start + size]),
        page=page,
        page_size=size,
        total_groups=len(groups),
        total_pages=total_pages,
        total_words=total_words,
    )


class GroupBrowser:
    """Search / filter / page state for browsing groups.

    Any filter change puts the browser back on page 1, so the current page
    always points inside the filtered sequence.
    """

    def __init__(self, page_size: int | None = None) -> None:
        self.page_size = page_size or settings.default_page_size
        self.search: str | None = None
        self.language: str | None = None
        self.category: str | None = None
        self.page = 1

    def set_search(self, search: str | None) -> None:
        self.search = search
        self.page = 1

    def set_language(self, language: str | None) -> None:
        self.language = language
        self.page = 1

    def set_category(self, category: str | None) -> None:
        self.category = category
        self.page = 1

    def go_to(self, page: int) -> None:
        self.page = page

    def view(self, entries: Sequence[WordEntry]) -> GroupPage:
        groups = filter_groups(build_groups(entries), self.search, self.language, self.category)
        return paginate(groups, self.page, self.page_size, total_words=len(entries))


async def apply_group_edit(store: DictionaryStore, group_id: WordId, edit: GroupEdit) -> WordEntry:
    """Write a group edit back to its single underlying entry."""
    current = await store.get(group_id)
    changes: dict[str, object] = {}
    if edit.main_word is not None:
        changes["word"] = normalize_word(edit.main_word)
    if edit.language is not None:
        changes["language"] = normalize_language(edit.language)
    if edit.category is not None:
        changes["category"] = normalize_category(edit.category)
    if edit.variations is not None:
        changes["variations"] = normalize_variations(edit.variations)

    updated = await store.update(group_id, current.model_copy(update=changes))
    logger.info("Group %s updated (%s)", group_id, ", ".join(sorted(changes)) or "no changes")
    return updated


async def delete_group(store: DictionaryStore, group_id: WordId) -> None:
    """Delete the group's entry, and with it all of its variations."""
    await store.delete(group_id)
    logger.info("Group %s deleted", group_id)
