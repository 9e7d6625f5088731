"""Dictionary export in the same four shapes the importer reads.

JSON, CSV and pipe renderings carry word, language, category and
variations, so re-importing an export with ``overwrite_existing`` updates
every entry in place. The plain list only carries words.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from wordguard.models.dictionary import ExportDocument, WordEntry
from wordguard.services.normalizer import normalize_category, normalize_language
from wordguard.services.parser import ImportFormat, resolve_format
from wordguard.services.store import DictionaryStore

logger = logging.getLogger(__name__)

_DELIMITED_HEADER = ("word", "language", "category", "variations")


async def export_words(
    store: DictionaryStore,
    language: str | None = None,
    category: str | None = None,
) -> ExportDocument:
    """Collect entries matching the optional filters, sorted by word."""
    wanted_language = normalize_language(language) if language else None
    wanted_category = normalize_category(category) if category else None

    words = [
        entry
        for entry in await store.fetch_all()
        if (wanted_language is None or entry.language == wanted_language)
        and (wanted_category is None or entry.category == wanted_category)
    ]
    words.sort(key=lambda e: e.identity)
    logger.info("Exporting %d word(s) (language=%s, category=%s)", len(words), wanted_language, wanted_category)

    return ExportDocument(
        words=words,
        total_count=len(words),
        exported_at=datetime.now(timezone.utc),
        filters={
            "language": str(wanted_language) if wanted_language else None,
            "category": str(wanted_category) if wanted_category else None,
        },
    )


def _fields(entry: WordEntry) -> list[str]:
    return [entry.word, str(entry.language), str(entry.category), ";".join(entry.variations)]


def _delimited_line(fields: list[str]) -> str:
    # The importer splits a line on tabs when it has one, so a comma inside a
    # field is kept intact by switching that line to tabs.
    separator = "\t" if any("," in f for f in fields) else ","
    return separator.join(fields)


def render_export(document: ExportDocument, fmt: str | ImportFormat = ImportFormat.JSON) -> str:
    """Render *document* as text in *fmt*."""
    resolved = resolve_format(fmt)
    if resolved is ImportFormat.JSON:
        return document.model_dump_json(indent=2)
    if resolved is ImportFormat.CSV:
        lines = [",".join(_DELIMITED_HEADER)]
        lines += [_delimited_line(_fields(entry)) for entry in document.words]
        return "\n".join(lines) + "\n"
    if resolved is ImportFormat.PIPE:
        return "".join("|".join(_fields(entry)) + "\n" for entry in document.words)
    return "".join(entry.word + "\n" for entry in document.words)


def export_filename(fmt: str | ImportFormat, when: datetime | None = None) -> str:
    resolved = resolve_format(fmt)
    suffix = {ImportFormat.JSON: "json", ImportFormat.CSV: "csv"}.get(resolved, "txt")
    stamp = (when or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
    return f"dictionary-export-{stamp}.{suffix}"
