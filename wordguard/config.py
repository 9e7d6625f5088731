"""Centralised service configuration loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings — values are sourced from env vars or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────────────
    database_url: str = Field(
        default=f"sqlite:///{_PROJECT_ROOT / 'data' / 'wordguard.db'}",
        description="SQLAlchemy connection URL for the dictionary store",
    )
    store_backend: Literal["sql", "http"] = "sql"
    store_base_url: str = Field(
        default="http://localhost:5000/api/admin/dictionary",
        description="Base URL of the remote dictionary REST service (store_backend=http)",
    )
    store_timeout: float = 10.0

    # ── Dictionary browsing / import ─────────────────────────────────────
    default_page_size: int = 20
    max_page_size: int = 1000
    error_preview_limit: int = 20
    max_upload_bytes: int = 5 * 1024 * 1024

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"])
    debug: bool = False


settings = Settings()
