"""Uniform JSON response envelope for the admin API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = "Success"
    data: T | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error_code: str | None = None
    data: Any = None
    timestamp: datetime = Field(default_factory=_utcnow)
