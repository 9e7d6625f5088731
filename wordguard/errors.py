"""Exception taxonomy for dictionary ingestion and storage.

Per-record problems (``InvalidWordError``) are caught by the reconciler and
folded into the import summary. Format and storage problems propagate to the
caller unchanged; the API layer maps each class to an HTTP status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wordguard.models.dictionary import ReconciliationResult


class WordGuardError(Exception):
    """Base class for all dictionary service errors."""

    status_code: int = 500
    error_code: str = "internal_error"


class InvalidWordError(WordGuardError, ValueError):
    """The word field is missing or empty after trimming."""

    status_code = 422
    error_code = "invalid_word"


class UnsupportedFormatError(WordGuardError, ValueError):
    """Uploaded content matches none of the parseable import shapes."""

    status_code = 400
    error_code = "unsupported_format"


class StoreUnavailableError(WordGuardError):
    """The dictionary store could not be reached.

    When raised out of a bulk import, ``partial_result`` holds the summary of
    the records processed before the failure.
    """

    status_code = 503
    error_code = "store_unavailable"

    def __init__(self, message: str = "Dictionary store is unavailable") -> None:
        super().__init__(message)
        self.partial_result: ReconciliationResult | None = None


class WordNotFoundError(WordGuardError, LookupError):
    status_code = 404
    error_code = "word_not_found"

    def __init__(self, word_id: object) -> None:
        super().__init__(f"Word not found: {word_id}")
        self.word_id = word_id


class DuplicateWordError(WordGuardError):
    """Another entry already holds the (word, language) identity."""

    status_code = 409
    error_code = "duplicate_word"

    def __init__(self, word: str, language: str) -> None:
        super().__init__(f'Word "{word}" already exists in the {language} dictionary')
        self.word = word
        self.language = language


class PageOutOfRangeError(WordGuardError, IndexError):
    status_code = 400
    error_code = "page_out_of_range"

    def __init__(self, page: int, total_pages: int) -> None:
        super().__init__(f"Page {page} is out of range (1..{max(total_pages, 1)})")
        self.page = page
        self.total_pages = total_pages


class WordRejectedError(WordGuardError):
    """The remote dictionary service refused a record (a 4xx other than 404/409)."""

    status_code = 422
    error_code = "word_rejected"

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status
