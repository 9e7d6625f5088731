"""Multi-format import parser.

Turns an uploaded artifact into an ordered list of ``ImportCandidate``s.
Four shapes are understood:

* JSON — a bare array of word objects, or ``{"words": [...]}``
* CSV/TSV — header line, then ``word,language,category[,variations]``
* pipe text — ``word|language|category[|variations]`` per line
* plain list — one bare word per line

Parsing is deterministic and keeps file order; the reconciler relies on that
for last-occurrence-wins within a batch. No normalisation happens here
beyond trimming, except that plain lists get the normaliser's word-list
defaults since they carry no language or category at all.
"""

from __future__ import annotations

import json
import logging
from enum import StrEnum
from pathlib import PurePath
from typing import Any

from wordguard.errors import UnsupportedFormatError
from wordguard.models.dictionary import ImportCandidate
from wordguard.services.normalizer import DEFAULT_LANGUAGE, WORD_LIST_CATEGORY

logger = logging.getLogger(__name__)

_QUOTES = "\"'"
_VARIATION_SEPARATOR = ";"


class ImportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"
    PIPE = "pipe"
    TEXT = "text"


_FORMAT_ALIASES = {
    "tsv": ImportFormat.CSV,
    "txt": ImportFormat.TEXT,
    "plain": ImportFormat.TEXT,
    "list": ImportFormat.TEXT,
}


def _clean_field(value: str) -> str:
    return value.strip().strip(_QUOTES).strip()


def _split_variations(value: str) -> list[str]:
    return [v for v in (_clean_field(part) for part in value.split(_VARIATION_SEPARATOR)) if v]


def _candidate_from_fields(fields: list[str]) -> ImportCandidate | None:
    fields = [_clean_field(f) for f in fields]
    fields += [""] * (3 - len(fields))
    word, language, category = fields[0], fields[1], fields[2]
    if not word:
        return None
    variations = _split_variations(fields[3]) if len(fields) > 3 else []
    return ImportCandidate(word=word, language=language, category=category, variations=variations)


def parse_json(text: str) -> list[ImportCandidate]:
    """Parse a JSON array of word objects or an object with a ``words`` array."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UnsupportedFormatError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("words"), list):
        items = data["words"]
    else:
        raise UnsupportedFormatError('Expected a JSON array or an object with a "words" array')

    return parse_items(items)


def parse_items(items: list[Any]) -> list[ImportCandidate]:
    """Turn already-decoded JSON word objects into candidates."""
    if not items:
        raise UnsupportedFormatError("No words found in JSON document")
    return [ImportCandidate.model_validate(item) for item in items]


def parse_delimited(text: str) -> list[ImportCandidate]:
    """Parse CSV or TSV text. The first line is a header and is discarded.

    Each line is split on tabs when it contains one, otherwise on commas.
    """
    candidates: list[ImportCandidate] = []
    dropped = 0
    for line in text.splitlines()[1:]:
        if not line.strip():
            continue
        separator = "\t" if "\t" in line else ","
        candidate = _candidate_from_fields(line.split(separator))
        if candidate is None:
            dropped += 1
            continue
        candidates.append(candidate)
    if dropped:
        logger.debug("Dropped %d delimited line(s) with an empty word", dropped)
    return candidates


def parse_pipe(text: str) -> list[ImportCandidate]:
    """Parse ``word|language|category`` lines; missing trailing fields are empty."""
    candidates: list[ImportCandidate] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        candidate = _candidate_from_fields(line.split("|"))
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def parse_word_list(text: str) -> list[ImportCandidate]:
    """One bare word per line."""
    return [
        ImportCandidate(word=word, language=DEFAULT_LANGUAGE, category=WORD_LIST_CATEGORY)
        for word in (line.strip() for line in text.splitlines())
        if word
    ]


_PARSERS = {
    ImportFormat.JSON: parse_json,
    ImportFormat.CSV: parse_delimited,
    ImportFormat.PIPE: parse_pipe,
    ImportFormat.TEXT: parse_word_list,
}


def resolve_format(value: str | ImportFormat) -> ImportFormat:
    """Turn a declared format name (``json``, ``csv``, ``tsv``, ``pipe``, ``txt``…) into an ``ImportFormat``."""
    if isinstance(value, ImportFormat):
        return value
    key = value.strip().lower().lstrip(".")
    if key in _FORMAT_ALIASES:
        return _FORMAT_ALIASES[key]
    try:
        return ImportFormat(key)
    except ValueError:
        raise UnsupportedFormatError(f"Unsupported import format: {value!r}") from None


def detect_format(text: str, filename: str | None = None) -> ImportFormat:
    """Guess the import format from the file extension, then from content."""
    lines = [line for line in text.splitlines() if line.strip()]
    has_pipes = any("|" in line for line in lines)

    if filename:
        suffix = PurePath(filename).suffix.lower()
        if suffix == ".json":
            return ImportFormat.JSON
        if suffix in (".csv", ".tsv"):
            return ImportFormat.CSV
        if suffix == ".txt":
            return ImportFormat.PIPE if has_pipes else ImportFormat.TEXT

    stripped = text.lstrip()
    if stripped.startswith(("[", "{")):
        return ImportFormat.JSON
    if has_pipes:
        return ImportFormat.PIPE
    if lines and ("," in lines[0] or "\t" in lines[0]):
        return ImportFormat.CSV
    return ImportFormat.TEXT


def decode_upload(content: str | bytes) -> str:
    if isinstance(content, str):
        return content.removeprefix("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise UnsupportedFormatError("Uploaded file is not UTF-8 text") from exc


def parse_candidates(
    content: str | bytes,
    fmt: str | ImportFormat | None = None,
    filename: str | None = None,
) -> list[ImportCandidate]:
    """Parse *content* in the declared format, or a detected one.

    Raises ``UnsupportedFormatError`` when the format is unknown, the content
    does not fit it, or no records come out at all.
    """
    text = decode_upload(content)
    if fmt:
        resolved = resolve_format(fmt)
    else:
        resolved = detect_format(text, filename)
        logger.debug("Detected %s format for %s", resolved, filename or "upload")

    candidates = _PARSERS[resolved](text)
    if not candidates:
        raise UnsupportedFormatError(f"No words found in {resolved} input")
    logger.info("Parsed %d candidate(s) from %s input", len(candidates), resolved)
    return candidates
