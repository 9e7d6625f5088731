"""FastAPI application — WordGuard moderation dictionary service.

Start with::

    uvicorn wordguard.main:app --reload --port 8000

Or::

    python -m wordguard serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from wordguard.config import settings
from wordguard.database import init_db
from wordguard.errors import StoreUnavailableError, WordGuardError
from wordguard.models.envelope import ErrorResponse
from wordguard.routers import groups, transfer, words
from wordguard.services.store import get_store

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="WordGuard Dictionary API",
    description=(
        "Admin API for the content-moderation dictionary: word CRUD, "
        "bulk import from JSON/CSV/pipe/plain lists, export, and "
        "synonym/variation group browsing."
    ),
    version="1.0.0",
)

# ── CORS — allow the admin console dev server ───────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Register route modules ──────────────────────────────────────────────
app.include_router(words.router)
app.include_router(groups.router)
app.include_router(transfer.router)


def _error(status_code: int, message: str, error_code: str | None = None, data: object = None) -> JSONResponse:
    body = ErrorResponse(message=message, error_code=error_code, data=data)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(WordGuardError)
async def _handle_wordguard_error(request: Request, exc: WordGuardError) -> JSONResponse:
    data = None
    if isinstance(exc, StoreUnavailableError):
        logger.error("Store unavailable during %s %s: %s", request.method, request.url.path, exc)
        if exc.partial_result is not None:
            data = exc.partial_result.model_dump()
    return _error(exc.status_code, str(exc), exc.error_code, data)


@app.exception_handler(HTTPException)
async def _handle_http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(422, "Validation error", "validation_error", jsonable_encoder(exc.errors()))


@app.on_event("startup")
async def _startup() -> None:
    if settings.store_backend == "sql":
        init_db()
    logger.info("Dictionary store ready (%s) — server ready", settings.store_backend)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await get_store().close()


@app.get("/api/health")
async def health():
    """Simple health-check endpoint."""
    return {"status": "ok", "store_backend": settings.store_backend}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wordguard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
