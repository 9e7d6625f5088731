from __future__ import annotations

import os

# Settings are read at import time; keep the test run off the on-disk database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORE_BACKEND", "sql")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from wordguard.database import init_db, make_engine
from wordguard.main import app
from wordguard.models.dictionary import Category, Language, WordEntry
from wordguard.services.store import (
    InMemoryDictionaryStore,
    SqlDictionaryStore,
    get_store,
)


def make_entry(
    word: str,
    language: Language = Language.ENGLISH,
    category: Category = Category.PROFANITY,
    variations: list[str] | None = None,
    **extra,
) -> WordEntry:
    return WordEntry(
        word=word,
        language=language,
        category=category,
        variations=variations or [],
        **extra,
    )


@pytest.fixture
def memory_store() -> InMemoryDictionaryStore:
    return InMemoryDictionaryStore()


@pytest.fixture
def seeded_store() -> InMemoryDictionaryStore:
    return InMemoryDictionaryStore([
        make_entry("gago", Language.FILIPINO, Category.PROFANITY, ["gaga", "gagoh"]),
        make_entry("puta", Language.FILIPINO, Category.PROFANITY),
        make_entry("idiot", Language.ENGLISH, Category.BULLYING, ["idiots", "idiotic"]),
        make_entry("loser", Language.ENGLISH, Category.BULLYING),
    ])


@pytest.fixture
def sql_store():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield SqlDictionaryStore(sessionmaker(bind=engine))
    engine.dispose()


@pytest.fixture
def client(sql_store: SqlDictionaryStore):
    app.dependency_overrides[get_store] = lambda: sql_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def entry():
    """Factory for ``WordEntry`` objects with test-friendly defaults."""
    return make_entry
