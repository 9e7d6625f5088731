from __future__ import annotations

import json

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wordguard.errors import (
    DuplicateWordError,
    StoreUnavailableError,
    WordNotFoundError,
    WordRejectedError,
)
from wordguard.models.dictionary import Category, Language
from wordguard.services.store import (
    HttpDictionaryStore,
    InMemoryDictionaryStore,
    SqlDictionaryStore,
)


class TestSqlDictionaryStore:
    @pytest.mark.asyncio
    async def test_insert_get_update_delete(self, sql_store: SqlDictionaryStore, entry) -> None:
        created = await sql_store.insert(entry("gago", Language.FILIPINO, variations=["gaga"]))

        assert isinstance(created.id, int)
        assert created.created_at is not None
        fetched = await sql_store.get(created.id)
        assert fetched.word == "gago"
        assert fetched.language is Language.FILIPINO
        assert fetched.variations == ["gaga"]

        updated = await sql_store.update(
            str(created.id), fetched.model_copy(update={"category": Category.SLUR, "variations": []})
        )
        assert updated.category is Category.SLUR
        assert updated.variations == []

        await sql_store.delete(created.id)
        assert await sql_store.fetch_all() == []

    @pytest.mark.asyncio
    async def test_identity_is_unique_ignoring_case(self, sql_store: SqlDictionaryStore, entry) -> None:
        await sql_store.insert(entry("BadWord"))

        with pytest.raises(DuplicateWordError):
            await sql_store.insert(entry("badword "))

        await sql_store.insert(entry("badword", Language.FILIPINO))
        assert len(await sql_store.fetch_all()) == 2

    @pytest.mark.asyncio
    async def test_update_into_taken_identity(self, sql_store: SqlDictionaryStore, entry) -> None:
        await sql_store.insert(entry("alpha"))
        beta = await sql_store.insert(entry("beta"))

        with pytest.raises(DuplicateWordError):
            await sql_store.update(beta.id, beta.model_copy(update={"word": "Alpha"}))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("word_id", [999, "999", "not-a-number"])
    async def test_missing_ids(self, sql_store: SqlDictionaryStore, entry, word_id) -> None:
        with pytest.raises(WordNotFoundError):
            await sql_store.get(word_id)
        with pytest.raises(WordNotFoundError):
            await sql_store.update(word_id, entry("x"))
        with pytest.raises(WordNotFoundError):
            await sql_store.delete(word_id)

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path) -> None:
        engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'dictionary.db'}")
        store = SqlDictionaryStore(sessionmaker(bind=engine))

        with pytest.raises(StoreUnavailableError):
            await store.fetch_all()


class TestInMemoryDictionaryStore:
    @pytest.mark.asyncio
    async def test_returns_copies(self, seeded_store: InMemoryDictionaryStore) -> None:
        (first, *_) = await seeded_store.fetch_all()
        first.variations.append("mutated")

        assert "mutated" not in (await seeded_store.get(first.id)).variations

    @pytest.mark.asyncio
    async def test_duplicate_identity(self, seeded_store: InMemoryDictionaryStore, entry) -> None:
        with pytest.raises(DuplicateWordError):
            await seeded_store.insert(entry("GAGO", Language.FILIPINO))

    @pytest.mark.asyncio
    async def test_update_keeps_created_at(self, memory_store: InMemoryDictionaryStore, entry) -> None:
        created = await memory_store.insert(entry("word"))

        updated = await memory_store.update(created.id, created.model_copy(update={"is_active": False}))

        assert updated.created_at == created.created_at
        assert updated.is_active is False


def _remote_word(pk: int, word: str, **extra) -> dict:
    return {
        "_id": str(pk),
        "word": word,
        "language": "Filipino",
        "category": "profanity",
        "variations": [],
        "isActive": True,
        "detectionCount": 3,
        **extra,
    }


def _http_store(handler) -> HttpDictionaryStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://dictionary.test/api")
    return HttpDictionaryStore("http://dictionary.test/api", client=client)


class TestHttpDictionaryStore:
    @pytest.mark.asyncio
    async def test_fetch_all_follows_pages(self) -> None:
        remote = [_remote_word(i, f"word{i}") for i in range(5)]
        pages: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            limit = int(request.url.params["limit"])
            pages.append(request.url.params["page"])
            chunk = remote[(page - 1) * limit : page * limit]
            return httpx.Response(
                200,
                json={"success": True, "data": {"words": chunk, "pagination": {"total": len(remote)}}},
            )

        store = _http_store(handler)
        store.page_limit = 2

        entries = await store.fetch_all()

        assert [e.word for e in entries] == [f"word{i}" for i in range(5)]
        assert pages == ["1", "2", "3"]
        assert entries[0].id == "0"
        assert entries[0].detection_count == 3

    @pytest.mark.asyncio
    async def test_insert_sends_canonical_fields(self, entry) -> None:
        sent: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            sent.append(body)
            return httpx.Response(201, json={"success": True, "data": _remote_word(7, body["word"])})

        store = _http_store(handler)

        created = await store.insert(entry("gago", Language.FILIPINO, variations=["gaga"]))

        assert created.id == "7"
        assert sent[0]["word"] == "gago"
        assert sent[0]["language"] == "Filipino"
        assert sent[0]["variations"] == ["gaga"]
        assert "id" not in sent[0]

    @pytest.mark.asyncio
    async def test_error_statuses(self, entry) -> None:
        statuses = iter([404, 409, 503])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses), json={"success": False})

        store = _http_store(handler)

        with pytest.raises(WordNotFoundError):
            await store.get("abc")
        with pytest.raises(DuplicateWordError):
            await store.insert(entry("gago"))
        with pytest.raises(StoreUnavailableError):
            await store.delete("abc")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 422])
    async def test_client_error_rejects_the_record(self, entry, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"success": False, "message": "word contains invalid characters"})

        with pytest.raises(WordRejectedError, match="invalid characters") as exc_info:
            await _http_store(handler).insert(entry("b@d"))

        assert exc_info.value.status == status

    @pytest.mark.asyncio
    async def test_client_error_without_message(self, entry) -> None:
        store = _http_store(lambda request: httpx.Response(400, text="nope"))

        with pytest.raises(WordRejectedError, match=r"rejected the record \(400\)"):
            await store.insert(entry("x"))

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreUnavailableError, match="unreachable"):
            await _http_store(handler).fetch_all()

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self) -> None:
        store = _http_store(lambda request: httpx.Response(204))

        await store.close()
        await store.delete("1")
