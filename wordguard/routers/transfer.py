"""Bulk import and export endpoints.

Only one import runs at a time per process; a second request while one is
in flight gets 409 rather than racing on the same identities.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from fastapi.responses import PlainTextResponse

from wordguard.config import settings
from wordguard.models.dictionary import (
    ExportDocument,
    ExportRequest,
    ImportCandidate,
    ImportPolicy,
    ImportRequest,
    ImportSummary,
)
from wordguard.models.envelope import ApiResponse
from wordguard.services.exporter import export_filename, export_words, render_export
from wordguard.services.parser import ImportFormat, parse_candidates, parse_items, resolve_format
from wordguard.services.reconciler import import_words
from wordguard.services.store import DictionaryStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/dictionary", tags=["import-export"])

Store = Annotated[DictionaryStore, Depends(get_store)]

_import_lock = asyncio.Lock()


async def _run_import(candidates: list[ImportCandidate], policy: ImportPolicy, store: DictionaryStore) -> ImportSummary:
    if _import_lock.locked():
        raise HTTPException(status_code=409, detail="Another import is already in progress")
    async with _import_lock:
        result = await import_words(candidates, policy, store)
    return ImportSummary.from_result(result, settings.error_preview_limit)


def _message(summary: ImportSummary) -> str:
    if summary.imported or summary.updated:
        return (
            f"Import completed: {summary.imported} imported, "
            f"{summary.updated} updated, {summary.skipped} skipped"
        )
    return "Import completed with no changes"


@router.post("/import", response_model=ApiResponse[ImportSummary])
async def import_json(body: ImportRequest, store: Store):
    """Import a JSON array of word objects (the admin console's upload path)."""
    candidates = parse_items(body.words)
    summary = await _run_import(candidates, body.options, store)
    return ApiResponse(data=summary, message=_message(summary))


@router.post("/import/upload", response_model=ApiResponse[ImportSummary])
async def import_file(
    store: Store,
    file: UploadFile = File(...),
    format: str | None = Form(None),
    overwrite_existing: bool = Form(False),
    skip_invalid: bool = Form(True),
):
    """Import an uploaded JSON, CSV/TSV, pipe-delimited or plain word list file.

    The format is taken from ``format`` when given, otherwise detected from
    the file name and content.
    """
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large.")

    candidates = parse_candidates(content, format, filename=file.filename)
    policy = ImportPolicy(overwrite_existing=overwrite_existing, skip_invalid=skip_invalid)
    summary = await _run_import(candidates, policy, store)
    return ApiResponse(data=summary, message=_message(summary))


@router.post("/export", response_model=ApiResponse[ExportDocument])
async def export(body: ExportRequest, store: Store, response: Response):
    """Export the dictionary, optionally filtered, as JSON or a text format."""
    fmt = resolve_format(body.format)
    document = await export_words(store, body.language, body.category)
    filename = export_filename(fmt, document.exported_at)

    if fmt is not ImportFormat.JSON:
        media_type = "text/csv" if fmt is ImportFormat.CSV else "text/plain"
        return PlainTextResponse(
            render_export(document, fmt),
            media_type=media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return ApiResponse(data=document, message=f"Exported {document.total_count} words")
