"""Synonym / variation group browsing and editing."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from wordguard.config import settings
from wordguard.models.dictionary import GroupEdit, GroupPage, WordEntry
from wordguard.models.envelope import ApiResponse
from wordguard.services.grouper import (
    apply_group_edit,
    build_groups,
    delete_group,
    filter_groups,
    paginate,
)
from wordguard.services.store import DictionaryStore, get_store

router = APIRouter(prefix="/api/admin/dictionary/groups", tags=["groups"])

Store = Annotated[DictionaryStore, Depends(get_store)]


@router.get("", response_model=ApiResponse[GroupPage])
async def list_groups(
    store: Store,
    search: str | None = None,
    language: str | None = None,
    category: str | None = None,
    page: int = Query(1),
    page_size: int | None = Query(None, ge=1),
):
    """Words with variations, grouped, filtered and paged.

    Clients should request page 1 whenever they change a filter; a page past
    the end of the filtered groups is rejected.
    """
    entries = await store.fetch_all()
    groups = filter_groups(build_groups(entries), search, language, category)
    size = min(page_size or settings.default_page_size, settings.max_page_size)
    result = paginate(groups, page, size, total_words=len(entries))
    return ApiResponse(data=result, message="Word groups retrieved")


@router.put("/{group_id}", response_model=ApiResponse[WordEntry])
async def edit_group(group_id: str, body: GroupEdit, store: Store):
    """Edit main word, language, category or variations of one group."""
    entry = await apply_group_edit(store, group_id, body)
    return ApiResponse(data=entry, message="Word group updated")


@router.delete("/{group_id}", response_model=ApiResponse[None])
async def remove_group(group_id: str, store: Store):
    """Delete the group's word together with all of its variations."""
    await delete_group(store, group_id)
    return ApiResponse(message="Word group deleted")
