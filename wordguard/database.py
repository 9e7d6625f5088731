"""SQLite database engine and session helpers.

Uses SQLAlchemy 2.x with the synchronous driver; the async store gateway
wraps short-lived sessions from ``SessionLocal``.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from wordguard.config import settings


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WordRecord(Base):
    """Persisted dictionary word.

    ``word_key`` is the lower-cased word; together with ``language`` it is
    the entry's identity and is unique.
    """

    __tablename__ = "dictionary_words"
    __table_args__ = (UniqueConstraint("word_key", "language", name="uq_word_language"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    word = Column(String(256), nullable=False)
    word_key = Column(String(256), nullable=False, index=True)
    language = Column(String(16), nullable=False, index=True)  # English | Filipino
    category = Column(String(16), nullable=False, index=True)
    variations_json = Column(Text, nullable=False, default="[]")
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    source = Column(String(16), nullable=False, default="system")  # system | user | ai | community
    detection_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    @property
    def variations(self) -> list[str]:
        return json.loads(self.variations_json) if self.variations_json else []

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "language": self.language,
            "category": self.category,
            "variations": self.variations,
            "is_active": self.is_active,
            "source": self.source,
            "detection_count": self.detection_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def make_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite"):
        if url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        Path(url.replace("sqlite:///", "")).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo)


engine = make_engine(settings.database_url, echo=settings.debug)
SessionLocal = sessionmaker(bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables if they do not exist."""
    Base.metadata.create_all(bind=bind or engine)

