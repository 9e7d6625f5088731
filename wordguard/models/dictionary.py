"""Dictionary models — canonical word records, import candidates, groups.

``WordEntry`` is the only persisted shape. ``ImportCandidate`` is whatever a
bulk upload gave us, coerced just enough to be typed; ``WordGroup`` is a
read-side view rebuilt from entries on demand.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Language(StrEnum):
    ENGLISH = "English"
    FILIPINO = "Filipino"


class Category(StrEnum):
    PROFANITY = "profanity"
    SLUR = "slur"
    BULLYING = "bullying"
    SEXUAL = "sexual"
    OTHER = "other"


class WordSource(StrEnum):
    SYSTEM = "system"
    USER = "user"
    AI = "ai"
    COMMUNITY = "community"


class WordEntry(BaseModel):
    """Canonical dictionary record."""

    id: int | str | None = None
    word: str = Field(min_length=1)
    language: Language
    category: Category
    variations: list[str] = Field(default_factory=list)
    is_active: bool = True
    source: WordSource = WordSource.SYSTEM
    detection_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def identity(self) -> tuple[str, Language]:
        from wordguard.services.normalizer import identity_key

        return identity_key(self.word, self.language)


class ImportCandidate(BaseModel):
    """A raw bulk-import record prior to normalisation.

    Scalars of the wrong type are stringified; a ``variations`` string is
    split on commas and semicolons. Everything else is left for the
    normaliser to judge.
    """

    word: str | None = None
    language: str | None = None
    category: str | None = None
    variations: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _coerce_loose_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        coerced: dict[str, Any] = {}
        for key in ("word", "language", "category"):
            value = data.get(key)
            if value is None or isinstance(value, (dict, list)):
                coerced[key] = None
            else:
                coerced[key] = str(value)
        raw = data.get("variations")
        if isinstance(raw, str):
            coerced["variations"] = [v for v in raw.replace(";", ",").split(",")]
        elif isinstance(raw, (list, tuple)):
            coerced["variations"] = [str(v) for v in raw if v is not None and not isinstance(v, (dict, list))]
        else:
            coerced["variations"] = []
        return coerced


class ImportPolicy(BaseModel):
    """Caller-supplied reconciliation flags."""

    model_config = ConfigDict(populate_by_name=True)

    overwrite_existing: bool = Field(default=False, alias="overwriteExisting")
    skip_invalid: bool = Field(default=True, alias="skipInvalid")


class ReconciliationResult(BaseModel):
    """Outcome of one bulk-import run.

    ``total`` counts records actually processed, so a run that stopped early
    still satisfies ``total == imported + updated + skipped + len(errors)``.
    """

    total: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    completed: bool = True


class ImportSummary(ReconciliationResult):
    """Result shaped for display: the full error list plus a bounded preview."""

    errors_preview: list[str] = Field(default_factory=list)
    more_errors: int = 0

    @classmethod
    def from_result(cls, result: ReconciliationResult, preview_limit: int) -> ImportSummary:
        preview = result.errors[:preview_limit]
        return cls(
            **result.model_dump(),
            errors_preview=preview,
            more_errors=len(result.errors) - len(preview),
        )


class WordGroup(BaseModel):
    """A main word and its variations, derived from one ``WordEntry``."""

    id: int | str | None = None
    main_word: str
    language: Language
    category: Category
    variations: list[str] = Field(default_factory=list)
    word_count: int = 1


class GroupPage(BaseModel):
    groups: list[WordGroup] = Field(default_factory=list)
    page: int = 1
    page_size: int = 20
    total_groups: int = 0
    total_pages: int = 0
    total_words: int = 0


class GroupEdit(BaseModel):
    """Edit applied to a group; every field optional, unset means unchanged."""

    main_word: str | None = None
    language: str | None = None
    category: str | None = None
    variations: list[str] | None = None


class ExportDocument(BaseModel):
    words: list[WordEntry] = Field(default_factory=list)
    total_count: int = 0
    exported_at: datetime | None = None
    filters: dict[str, str | None] = Field(default_factory=dict)


class DetectionWord(BaseModel):
    """Flattened word or variation for detection clients."""

    word: str
    category: Category
    is_variation: bool = False
    original_word: str | None = None


class CategoryStats(BaseModel):
    category: Category
    count: int = 0
    total_detections: int = 0


class LanguageStats(BaseModel):
    language: Language
    total_words: int = 0
    total_detections: int = 0
    categories: list[CategoryStats] = Field(default_factory=list)


class WordPage(BaseModel):
    words: list[WordEntry] = Field(default_factory=list)
    page: int = 1
    limit: int = 100
    total: int = 0
    total_pages: int = 0


# ── Request bodies ───────────────────────────────────────────────────────


class WordCreate(BaseModel):
    """Single word submitted from the admin console."""

    word: str
    language: str = ""
    category: str = ""
    variations: list[str] = Field(default_factory=list)
    source: WordSource = WordSource.USER


class WordUpdate(BaseModel):
    """Partial update; unset fields are left unchanged."""

    word: str | None = None
    language: str | None = None
    category: str | None = None
    variations: list[str] | None = None


class StatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(alias="isActive")


class VariationsUpdate(BaseModel):
    variations: list[str]


class ImportRequest(BaseModel):
    """Bulk JSON import body: ``{"words": [...], "options": {...}}``."""

    words: list[Any]
    options: ImportPolicy = Field(default_factory=ImportPolicy)


class ExportRequest(BaseModel):
    language: str | None = None
    category: str | None = None
    format: str = "json"
