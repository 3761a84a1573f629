"""EmbeddingStore — one embedding row per note in the shared SQLite database."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete as sa_delete
from sqlalchemy import func
from sqlalchemy.dialects import sqlite as sqlite_dialect
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from stemnotes.exceptions import StorageError
from stemnotes.models import Note, NoteEmbedding
from stemnotes.search.codec import decode_vector, encode_vector
from stemnotes.search.types import EmbeddingRecord, RankCandidate

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stemnotes.database import Database

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class EmbeddingStore:
    """Persists note embeddings keyed by note id.

    Synchronous: every method takes the :class:`Database` lock, does its
    work in one transaction and releases the lock before returning.  Call
    it from a worker thread when running inside an event loop.

    Referential integrity with ``notes`` belongs to the schema
    (``ON DELETE CASCADE``); the store only deletes when told to.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(
        self,
        note_id: str,
        vector: Sequence[float],
        model: str,
        timestamp: datetime,
    ) -> EmbeddingRecord:
        """Store *vector* for *note_id*, replacing any previous record."""
        values = {
            "note_id": note_id,
            "embedding": encode_vector(vector),
            "model": model,
            "updated_at": _as_utc(timestamp),
        }
        stmt = sqlite_dialect.insert(NoteEmbedding).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["note_id"],
            set_={k: v for k, v in values.items() if k != "note_id"},
        )
        try:
            with self._db.session() as session:
                session.execute(stmt)
                session.commit()
        except SQLAlchemyError as exc:
            msg = f"Failed to store embedding for note {note_id!r}: {exc}"
            raise StorageError(msg) from exc

        return EmbeddingRecord(
            note_id=note_id,
            vector=decode_vector(values["embedding"]),
            model=model,
            updated_at=values["updated_at"],
        )

    def delete(self, note_id: str) -> bool:
        """Delete the record for *note_id*.  Returns True if one existed."""
        stmt = sa_delete(NoteEmbedding).where(
            NoteEmbedding.note_id == note_id,  # type: ignore[arg-type]
        )
        try:
            with self._db.session() as session:
                result = session.execute(stmt)
                session.commit()
        except SQLAlchemyError as exc:
            msg = f"Failed to delete embedding for note {note_id!r}: {exc}"
            raise StorageError(msg) from exc
        return bool(result.rowcount)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all_for_ranking(self, model: str | None = None) -> list[RankCandidate]:
        """Return every stored vector with its note title.

        When *model* is given, only vectors produced by that model are
        returned.  Order is unspecified.
        """
        stmt = select(NoteEmbedding.note_id, NoteEmbedding.embedding, Note.title).join(
            Note,
            Note.id == NoteEmbedding.note_id,  # type: ignore[arg-type]
        )
        if model is not None:
            stmt = stmt.where(NoteEmbedding.model == model)
        try:
            with self._db.session() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            msg = f"Failed to load embeddings: {exc}"
            raise StorageError(msg) from exc

        return [
            RankCandidate(note_id=note_id, vector=decode_vector(blob), title=title)
            for note_id, blob, title in rows
        ]

    def get(self, note_id: str) -> EmbeddingRecord | None:
        """Return the record for *note_id*, or None."""
        try:
            with self._db.session() as session:
                row = session.get(NoteEmbedding, note_id)
        except SQLAlchemyError as exc:
            msg = f"Failed to read embedding for note {note_id!r}: {exc}"
            raise StorageError(msg) from exc
        if row is None:
            return None
        return EmbeddingRecord(
            note_id=row.note_id,
            vector=decode_vector(row.embedding),
            model=row.model,
            updated_at=_as_utc(row.updated_at),
        )

    def has(self, note_id: str) -> bool:
        """Return whether *note_id* has a stored embedding."""
        return self.get(note_id) is not None

    def count(self) -> int:
        """Return the number of stored embeddings."""
        try:
            with self._db.session() as session:
                total = session.execute(
                    select(func.count()).select_from(NoteEmbedding)
                ).scalar_one()
        except SQLAlchemyError as exc:
            msg = f"Failed to count embeddings: {exc}"
            raise StorageError(msg) from exc
        return int(total)
