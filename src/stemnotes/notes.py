"""NoteService — note CRUD on the shared database, announcing changes on the event bus."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from stemnotes.events import EventType, NoteEvent
from stemnotes.exceptions import NoteNotFoundError, StorageError
from stemnotes.models import DEFAULT_TITLE, Note

if TYPE_CHECKING:
    from stemnotes.database import Database
    from stemnotes.events import EventBus

logger = logging.getLogger(__name__)

_UNSET = object()


class NoteService:
    """Create, read, update and delete notes.

    Database work runs in a worker thread.  ``NOTE_SAVED`` is emitted after
    every create/update and ``NOTE_DELETED`` after a delete, once the
    change is committed.
    """

    def __init__(self, database: Database, event_bus: EventBus | None = None) -> None:
        self._db = database
        self._event_bus = event_bus

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def create(
        self,
        title: str | None = None,
        content: str | None = None,
        *,
        folder_id: str | None = None,
    ) -> Note:
        note = await asyncio.to_thread(self._create_sync, title, content, folder_id)
        await self._emit(EventType.NOTE_SAVED, note)
        return note

    async def get(self, note_id: str) -> Note | None:
        return await asyncio.to_thread(self._get_sync, note_id)

    async def list_all(self) -> list[Note]:
        """Return all notes, pinned first, then most recently updated."""
        return await asyncio.to_thread(self._list_sync)

    async def update(
        self,
        note_id: str,
        *,
        title: str | None = None,
        content: str | None | object = _UNSET,
    ) -> Note:
        """Update *note_id*.  Omitted fields are left unchanged."""
        note = await asyncio.to_thread(self._update_sync, note_id, title, content)
        await self._emit(EventType.NOTE_SAVED, note)
        return note

    async def delete(self, note_id: str) -> bool:
        """Delete *note_id*.  Returns False if it did not exist."""
        deleted = await asyncio.to_thread(self._delete_sync, note_id)
        if deleted and self._event_bus is not None:
            await self._event_bus.emit(NoteEvent(EventType.NOTE_DELETED, note_id))
        return deleted

    async def toggle_pin(self, note_id: str) -> Note:
        return await asyncio.to_thread(self._toggle_pin_sync, note_id)

    async def title(self, note_id: str) -> str:
        """Return the title of *note_id*."""
        note = await self.get(note_id)
        if note is None:
            msg = f"Note not found: {note_id}"
            raise NoteNotFoundError(msg)
        return note.title

    # ------------------------------------------------------------------
    # Sync implementations
    # ------------------------------------------------------------------

    def _create_sync(self, title: str | None, content: str | None, folder_id: str | None) -> Note:
        note = Note(title=title or DEFAULT_TITLE, content=content, folder_id=folder_id)
        try:
            with self._db.session() as session:
                session.add(note)
                session.commit()
                session.refresh(note)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to create note: {exc}") from exc
        return note

    def _get_sync(self, note_id: str) -> Note | None:
        try:
            with self._db.session() as session:
                return session.get(Note, note_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read note {note_id!r}: {exc}") from exc

    def _list_sync(self) -> list[Note]:
        stmt = select(Note).order_by(
            Note.is_pinned.desc(),  # type: ignore[attr-defined]
            Note.updated_at.desc(),  # type: ignore[attr-defined]
        )
        try:
            with self._db.session() as session:
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list notes: {exc}") from exc

    def _update_sync(self, note_id: str, title: str | None, content: object) -> Note:
        try:
            with self._db.session() as session:
                note = session.get(Note, note_id)
                if note is None:
                    raise NoteNotFoundError(f"Note not found: {note_id}")
                if title is not None:
                    note.title = title
                if content is not _UNSET:
                    note.content = content  # type: ignore[assignment]
                note.updated_at = datetime.now(UTC)
                session.add(note)
                session.commit()
                session.refresh(note)
                return note
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to update note {note_id!r}: {exc}") from exc

    def _delete_sync(self, note_id: str) -> bool:
        stmt = sa_delete(Note).where(Note.id == note_id)  # type: ignore[arg-type]
        try:
            with self._db.session() as session:
                result = session.execute(stmt)
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete note {note_id!r}: {exc}") from exc
        return bool(result.rowcount)

    def _toggle_pin_sync(self, note_id: str) -> Note:
        try:
            with self._db.session() as session:
                note = session.get(Note, note_id)
                if note is None:
                    raise NoteNotFoundError(f"Note not found: {note_id}")
                note.is_pinned = not note.is_pinned
                session.add(note)
                session.commit()
                session.refresh(note)
                return note
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to pin note {note_id!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _emit(self, event_type: EventType, note: Note) -> None:
        if self._event_bus is None:
            return
        await self._event_bus.emit(NoteEvent(event_type, note.id, note.content))
