"""Dictionary store gateway.

The reconciler, grouper and API only ever talk to a ``DictionaryStore``:
``fetch_all``, ``get``, ``insert``, ``update`` and ``delete``. Three
implementations ship here:

* ``SqlDictionaryStore`` — the local SQLAlchemy table (default)
* ``HttpDictionaryStore`` — a remote dictionary REST service via httpx
* ``InMemoryDictionaryStore`` — dry runs and tests

Unreachable storage is always reported as ``StoreUnavailableError`` and is
never retried here; retry policy belongs to the caller.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol

import httpx
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from wordguard.config import settings
from wordguard.database import SessionLocal, WordRecord
from wordguard.errors import (
    DuplicateWordError,
    StoreUnavailableError,
    WordNotFoundError,
    WordRejectedError,
)
from wordguard.models.dictionary import WordEntry
from wordguard.services.normalizer import identity_key

logger = logging.getLogger(__name__)

WordId = int | str


class DictionaryStore(Protocol):
    async def fetch_all(self) -> list[WordEntry]: ...

    async def get(self, word_id: WordId) -> WordEntry: ...

    async def insert(self, entry: WordEntry) -> WordEntry: ...

    async def update(self, word_id: WordId, entry: WordEntry) -> WordEntry: ...

    async def delete(self, word_id: WordId) -> None: ...

    async def close(self) -> None: ...


# ── SQLAlchemy ───────────────────────────────────────────────────────────


def _entry_from_record(record: WordRecord) -> WordEntry:
    return WordEntry.model_validate(record.to_dict())


def _apply_entry(record: WordRecord, entry: WordEntry) -> None:
    record.word = entry.word
    record.word_key = identity_key(entry.word, entry.language)[0]
    record.language = str(entry.language)
    record.category = str(entry.category)
    record.variations_json = json.dumps(entry.variations)
    record.is_active = entry.is_active
    record.source = str(entry.source)
    record.detection_count = entry.detection_count


class SqlDictionaryStore:
    """Store backed by the ``dictionary_words`` table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def _coerce_id(self, word_id: WordId) -> int:
        try:
            return int(word_id)
        except (TypeError, ValueError):
            raise WordNotFoundError(word_id) from None

    async def fetch_all(self) -> list[WordEntry]:
        try:
            with self._session_factory() as db:
                records = db.query(WordRecord).order_by(WordRecord.word_key, WordRecord.language).all()
                return [_entry_from_record(r) for r in records]
        except OperationalError as exc:
            logger.exception("Dictionary fetch failed")
            raise StoreUnavailableError(str(exc.orig)) from exc

    async def get(self, word_id: WordId) -> WordEntry:
        pk = self._coerce_id(word_id)
        try:
            with self._session_factory() as db:
                record = db.get(WordRecord, pk)
                if record is None:
                    raise WordNotFoundError(word_id)
                return _entry_from_record(record)
        except OperationalError as exc:
            logger.exception("Dictionary lookup failed")
            raise StoreUnavailableError(str(exc.orig)) from exc

    async def insert(self, entry: WordEntry) -> WordEntry:
        try:
            with self._session_factory() as db:
                record = WordRecord()
                _apply_entry(record, entry)
                db.add(record)
                try:
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    raise DuplicateWordError(entry.word, entry.language) from None
                db.refresh(record)
                return _entry_from_record(record)
        except OperationalError as exc:
            logger.exception("Dictionary insert failed")
            raise StoreUnavailableError(str(exc.orig)) from exc

    async def update(self, word_id: WordId, entry: WordEntry) -> WordEntry:
        pk = self._coerce_id(word_id)
        try:
            with self._session_factory() as db:
                record = db.get(WordRecord, pk)
                if record is None:
                    raise WordNotFoundError(word_id)
                _apply_entry(record, entry)
                try:
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    raise DuplicateWordError(entry.word, entry.language) from None
                db.refresh(record)
                return _entry_from_record(record)
        except OperationalError as exc:
            logger.exception("Dictionary update failed")
            raise StoreUnavailableError(str(exc.orig)) from exc

    async def delete(self, word_id: WordId) -> None:
        pk = self._coerce_id(word_id)
        try:
            with self._session_factory() as db:
                record = db.get(WordRecord, pk)
                if record is None:
                    raise WordNotFoundError(word_id)
                db.delete(record)
                db.commit()
        except OperationalError as exc:
            logger.exception("Dictionary delete failed")
            raise StoreUnavailableError(str(exc.orig)) from exc

    async def close(self) -> None:
        return None


# ── REST ─────────────────────────────────────────────────────────────────

# Remote services may speak the camelCase / ``_id`` dialect.
_REMOTE_FIELD_ALIASES = {
    "_id": "id",
    "isActive": "is_active",
    "detectionCount": "detection_count",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def _entry_from_payload(item: dict[str, Any]) -> WordEntry:
    data = {_REMOTE_FIELD_ALIASES.get(k, k): v for k, v in item.items()}
    return WordEntry.model_validate(data)


def _rejection_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"Dictionary service rejected the record ({response.status_code})"


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "success" in payload:
        return payload.get("data")
    return payload


class HttpDictionaryStore:
    """Store backed by a remote dictionary REST service.

    Expects ``GET/POST {base}/words`` and ``GET/PUT/DELETE {base}/words/{id}``,
    optionally wrapped in a ``{"success": ..., "data": ...}`` envelope.
    """

    page_limit = 1000

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)
        self._owns_client = client is None

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.exception("Dictionary service request failed: %s %s", method, url)
            raise StoreUnavailableError(f"Dictionary service unreachable: {exc}") from exc

        if response.status_code >= 500:
            raise StoreUnavailableError(f"Dictionary service returned {response.status_code}")
        if response.status_code == 404:
            raise WordNotFoundError(url.rsplit("/", 1)[-1])
        if response.status_code == 409:
            body = kwargs.get("json") or {}
            raise DuplicateWordError(str(body.get("word", "")), str(body.get("language", "")))
        if response.status_code >= 400:
            raise WordRejectedError(_rejection_message(response), response.status_code)
        if not response.is_success:
            raise StoreUnavailableError(f"Dictionary service returned unexpected status {response.status_code}")
        if response.status_code == 204 or not response.content:
            return None
        return _unwrap(response.json())

    async def fetch_all(self) -> list[WordEntry]:
        entries: list[WordEntry] = []
        page = 1
        while True:
            data = await self._request("GET", "/words", params={"page": page, "limit": self.page_limit})
            items = data.get("words", []) if isinstance(data, dict) else (data or [])
            entries.extend(_entry_from_payload(item) for item in items)
            total = None
            if isinstance(data, dict):
                total = data.get("total", data.get("pagination", {}).get("total"))
            if not items or total is None or len(entries) >= total:
                return entries
            page += 1

    async def get(self, word_id: WordId) -> WordEntry:
        return _entry_from_payload(await self._request("GET", f"/words/{word_id}"))

    async def insert(self, entry: WordEntry) -> WordEntry:
        body = entry.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
        return _entry_from_payload(await self._request("POST", "/words", json=body))

    async def update(self, word_id: WordId, entry: WordEntry) -> WordEntry:
        body = entry.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
        return _entry_from_payload(await self._request("PUT", f"/words/{word_id}", json=body))

    async def delete(self, word_id: WordId) -> None:
        await self._request("DELETE", f"/words/{word_id}")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


# ── In-memory ────────────────────────────────────────────────────────────


class InMemoryDictionaryStore:
    """Dict-backed store with the same identity rules as the SQL table."""

    def __init__(self, entries: list[WordEntry] | None = None) -> None:
        self._entries: dict[int, WordEntry] = {}
        self._next_id = 1
        for entry in entries or []:
            self._add(entry)

    def _add(self, entry: WordEntry) -> WordEntry:
        self._check_identity(entry, exclude=None)
        now = datetime.now(timezone.utc)
        stored = entry.model_copy(update={"id": self._next_id, "created_at": now, "updated_at": now}, deep=True)
        self._entries[self._next_id] = stored
        self._next_id += 1
        return stored

    def _check_identity(self, entry: WordEntry, exclude: int | None) -> None:
        for pk, existing in self._entries.items():
            if pk != exclude and existing.identity == entry.identity:
                raise DuplicateWordError(entry.word, entry.language)

    def _lookup(self, word_id: WordId) -> int:
        try:
            pk = int(word_id)
        except (TypeError, ValueError):
            raise WordNotFoundError(word_id) from None
        if pk not in self._entries:
            raise WordNotFoundError(word_id)
        return pk

    async def fetch_all(self) -> list[WordEntry]:
        return sorted(
            (e.model_copy(deep=True) for e in self._entries.values()),
            key=lambda e: e.identity,
        )

    async def get(self, word_id: WordId) -> WordEntry:
        return self._entries[self._lookup(word_id)].model_copy(deep=True)

    async def insert(self, entry: WordEntry) -> WordEntry:
        return self._add(entry).model_copy(deep=True)

    async def update(self, word_id: WordId, entry: WordEntry) -> WordEntry:
        pk = self._lookup(word_id)
        self._check_identity(entry, exclude=pk)
        current = self._entries[pk]
        stored = entry.model_copy(
            update={"id": pk, "created_at": current.created_at, "updated_at": datetime.now(timezone.utc)},
            deep=True,
        )
        self._entries[pk] = stored
        return stored.model_copy(deep=True)

    async def delete(self, word_id: WordId) -> None:
        del self._entries[self._lookup(word_id)]

    async def close(self) -> None:
        return None


@lru_cache(maxsize=1)
def get_store() -> DictionaryStore:
    """Return the configured store (FastAPI dependency)."""
    if settings.store_backend == "http":
        logger.info("Using remote dictionary store at %s", settings.store_base_url)
        return HttpDictionaryStore(settings.store_base_url, timeout=settings.store_timeout)
    return SqlDictionaryStore(SessionLocal)
