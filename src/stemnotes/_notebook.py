"""Notebook — async facade wiring notes, event bus and semantic search."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from stemnotes.config import SearchConfig
from stemnotes.database import Database
from stemnotes.events import EventBus, EventType
from stemnotes.exceptions import NoteNotFoundError, StemError
from stemnotes.notes import NoteService
from stemnotes.search._pipeline import RetrievalPipeline
from stemnotes.search._scheduler import IndexScheduler
from stemnotes.search.providers.ollama import OllamaEmbedding
from stemnotes.search.store import EmbeddingStore

if TYPE_CHECKING:
    from pathlib import Path

    from stemnotes.events import NoteEvent
    from stemnotes.models import Note
    from stemnotes.search.protocols import EmbeddingProvider
    from stemnotes.search.types import EmbeddingRecord, SemanticResult

logger = logging.getLogger(__name__)


class Notebook:
    """Async facade over the note store and its semantic search index.

    Saving a note schedules a debounced re-index (when ``auto_index`` is
    on); deleting a note drops its embedding.  Indexing failures on that
    path are logged and never fail the edit.  Direct calls to
    :meth:`index_note` and :meth:`search` raise provider and storage
    errors to the caller.

    Usage::

        async with Notebook("~/.stem/notes.db") as nb:
            note = await nb.create_note("Groceries", "eggs, milk")
            await nb.index_note(note.id)
            hits = await nb.search("what do I need to buy?")
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        database: Database | None = None,
        embedding_provider: EmbeddingProvider | None = None,
        config: SearchConfig | None = None,
        **overrides: Any,
    ) -> None:
        if database is not None and db_path is not None:
            raise ValueError("Provide db_path or database, not both")

        self._config = (config or SearchConfig()).with_overrides(**overrides)
        if database is not None:
            self._database = database
        elif db_path is not None:
            self._database = Database.from_path(db_path)
        else:
            self._database = Database()

        self._owns_provider = embedding_provider is None
        self._provider: EmbeddingProvider = embedding_provider or OllamaEmbedding(
            self._config.base_url, timeout=self._config.index_timeout
        )

        self._event_bus = EventBus()
        self._notes = NoteService(self._database, self._event_bus)
        self._store = EmbeddingStore(self._database)
        self._pipeline = RetrievalPipeline(self._provider, self._store, config=self._config)
        self._scheduler = IndexScheduler(self._pipeline, debounce=self._config.index_debounce)
        self._opened = False
        self._closed = False

        self._event_bus.register(EventType.NOTE_SAVED, self._on_note_saved)
        self._event_bus.register(EventType.NOTE_DELETED, self._on_note_deleted)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Create tables if needed.  Idempotent."""
        if self._opened:
            return
        self._database.init()
        self._opened = True

    async def close(self) -> None:
        """Cancel pending indexing and release the provider and database."""
        if self._closed:
            return
        self._closed = True
        await self._scheduler.cancel_all()
        if self._owns_provider:
            await self._provider.close()
        self._database.close()

    async def __aenter__(self) -> Notebook:
        await self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def create_note(
        self,
        title: str | None = None,
        content: str | None = None,
        *,
        folder_id: str | None = None,
    ) -> Note:
        return await self._notes.create(title, content, folder_id=folder_id)

    async def get_note(self, note_id: str) -> Note | None:
        return await self._notes.get(note_id)

    async def list_notes(self) -> list[Note]:
        return await self._notes.list_all()

    async def update_note(self, note_id: str, **fields: Any) -> Note:
        return await self._notes.update(note_id, **fields)

    async def delete_note(self, note_id: str) -> bool:
        return await self._notes.delete(note_id)

    async def toggle_pin(self, note_id: str) -> Note:
        return await self._notes.toggle_pin(note_id)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def index_note(self, note_id: str) -> EmbeddingRecord | None:
        """Embed *note_id*'s current content now.  Blank notes are skipped."""
        note = await self._notes.get(note_id)
        if note is None:
            msg = f"Note not found: {note_id}"
            raise NoteNotFoundError(msg)
        return await self._pipeline.index(note.id, note.content or "")

    async def search(self, query: str, limit: int | None = None) -> list[SemanticResult]:
        """Return notes semantically similar to *query*, best first."""
        return await self._pipeline.search(query, limit=limit)

    async def reindex_all(self) -> dict[str, int]:
        """Embed every note with the configured model.

        Failures are logged and counted, they do not stop the run.
        """
        stats = {"indexed": 0, "skipped": 0, "failed": 0}
        for note in await self._notes.list_all():
            try:
                record = await self._pipeline.index(note.id, note.content or "")
            except StemError:
                logger.warning("Failed to index note %s", note.id, exc_info=True)
                stats["failed"] += 1
                continue
            stats["indexed" if record is not None else "skipped"] += 1
        logger.info(
            "Re-indexed notes: %d indexed, %d skipped, %d failed",
            stats["indexed"],
            stats["skipped"],
            stats["failed"],
        )
        return stats

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def _on_note_saved(self, event: NoteEvent) -> None:
        if not self._config.auto_index or self._closed:
            return
        self._scheduler.schedule(event.note_id, event.content or "")

    async def _on_note_deleted(self, event: NoteEvent) -> None:
        self._scheduler.cancel(event.note_id)
        await self._pipeline.remove(event.note_id)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> SearchConfig:
        return self._config

    @property
    def database(self) -> Database:
        return self._database

    @property
    def notes(self) -> NoteService:
        return self._notes

    @property
    def pipeline(self) -> RetrievalPipeline:
        return self._pipeline

    @property
    def scheduler(self) -> IndexScheduler:
        return self._scheduler

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus
