"""Dictionary word CRUD, search, detection list and stats endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from wordguard.config import settings
from wordguard.models.dictionary import (
    DetectionWord,
    LanguageStats,
    StatusUpdate,
    VariationsUpdate,
    WordCreate,
    WordEntry,
    WordPage,
    WordUpdate,
)
from wordguard.models.envelope import ApiResponse
from wordguard.services import dictionary
from wordguard.services.store import DictionaryStore, get_store

router = APIRouter(prefix="/api/admin/dictionary", tags=["dictionary"])

Store = Annotated[DictionaryStore, Depends(get_store)]


@router.get("/words", response_model=ApiResponse[WordPage])
async def list_words(
    store: Store,
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1),
    language: str | None = None,
    category: str | None = None,
    search: str | None = None,
):
    """Paginated master word list with optional language/category/search filters."""
    limit = min(limit, settings.max_page_size)
    entries = await store.fetch_all()
    result = dictionary.list_words(entries, page, limit, language, category, search)
    return ApiResponse(data=result, message="Dictionary words retrieved")


@router.post("/words", response_model=ApiResponse[WordEntry], status_code=status.HTTP_201_CREATED)
async def create_word(body: WordCreate, store: Store):
    """Add a word; an existing (word, language) gets the new variations merged in."""
    entry, created = await dictionary.add_word(store, body)
    return ApiResponse(data=entry, message="Word created" if created else "Word already exists; variations merged")


@router.get("/words/search", response_model=ApiResponse[list[WordEntry]])
async def search(store: Store, term: str = Query(..., min_length=1), language: str = Query(...)):
    """Search active words and their variations in one language."""
    words = dictionary.search_words(await store.fetch_all(), term, language)
    return ApiResponse(data=words, message="Search completed")


@router.get("/words/{word_id}", response_model=ApiResponse[WordEntry])
async def get_word(word_id: str, store: Store):
    return ApiResponse(data=await store.get(word_id), message="Word retrieved")


@router.put("/words/{word_id}", response_model=ApiResponse[WordEntry])
async def update_word(word_id: str, body: WordUpdate, store: Store):
    entry = await dictionary.update_word(store, word_id, body)
    return ApiResponse(data=entry, message="Word updated")


@router.delete("/words/{word_id}", response_model=ApiResponse[None])
async def delete_word(word_id: str, store: Store):
    await dictionary.delete_word(store, word_id)
    return ApiResponse(message="Word deleted")


@router.patch("/words/{word_id}/status", response_model=ApiResponse[WordEntry])
async def update_status(word_id: str, body: StatusUpdate, store: Store):
    """Activate or deactivate a word without deleting it."""
    entry = await dictionary.set_word_status(store, word_id, body.is_active)
    return ApiResponse(data=entry, message=f"Word {'activated' if body.is_active else 'deactivated'}")


@router.put("/words/{word_id}/variations", response_model=ApiResponse[WordEntry])
async def update_variations(word_id: str, body: VariationsUpdate, store: Store):
    entry = await dictionary.replace_variations(store, word_id, body.variations)
    return ApiResponse(data=entry, message="Word variations updated")


@router.get("/detection", response_model=ApiResponse[list[DetectionWord]])
async def detection(store: Store, language: str = Query(...)):
    """Flat list of active words and variations for detection clients."""
    words = dictionary.detection_words(await store.fetch_all(), language)
    return ApiResponse(data=words, message="Detection words retrieved")


@router.get("/stats", response_model=ApiResponse[list[LanguageStats]])
async def stats(store: Store):
    return ApiResponse(data=dictionary.dictionary_stats(await store.fetch_all()), message="Dictionary statistics")
