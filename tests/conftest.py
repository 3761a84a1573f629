"""Shared fixtures for stemnotes tests."""

from __future__ import annotations

import hashlib
import math
import os
from typing import TYPE_CHECKING

import pytest

from stemnotes.database import Database
from stemnotes.events import EventBus
from stemnotes.notes import NoteService
from stemnotes.search.store import EmbeddingStore

if TYPE_CHECKING:
    from collections.abc import Iterator


def hash_vector(text: str) -> list[float]:
    """Deterministic unit vector from text hash."""
    h = hashlib.sha256(text.encode()).digest()
    raw = [float(b) for b in h]
    norm = math.sqrt(sum(x * x for x in raw))
    return [x / norm for x in raw]


class FakeProvider:
    """Deterministic async embedding provider for testing.

    Texts found in *vectors* get that vector; anything else gets a hash
    vector.  Every call is recorded.  Set *error* to make calls raise.
    """

    def __init__(self, vectors: dict[str, list[float]] | None = None) -> None:
        self.vectors: dict[str, list[float]] = dict(vectors or {})
        self.calls: list[tuple[str, str, float | None]] = []
        self.error: Exception | None = None
        self.closed = False

    async def embed(self, model: str, text: str, *, timeout: float | None = None) -> list[float]:
        self.calls.append((model, text, timeout))
        if self.error is not None:
            raise self.error
        return self.vectors.get(text, hash_vector(text))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def database() -> Iterator[Database]:
    """In-memory database with the notes and embeddings tables created."""
    db = Database()
    db.init()
    yield db
    db.close()


@pytest.fixture
def store(database: Database) -> EmbeddingStore:
    return EmbeddingStore(database)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def notes(database: Database, event_bus: EventBus) -> NoteService:
    return NoteService(database, event_bus)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture(autouse=True)
def _clean_stem_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ``STEM_*`` variables from the outer environment out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("STEM_"):
            monkeypatch.delenv(name)
