"""NoteEmbedding model — one stored vector per note."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, LargeBinary, String
from sqlmodel import Field, SQLModel


class NoteEmbedding(SQLModel, table=True):
    """The embedding of a note, as produced by a single model.

    ``embedding`` holds the little-endian float32 bytes written by
    :func:`stemnotes.search.codec.encode_vector`.  Re-embedding a note with
    another model overwrites the row; there is never more than one row per
    note.
    """

    __tablename__ = "note_embeddings"

    note_id: str = Field(
        sa_column=Column(
            String,
            ForeignKey("notes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    embedding: bytes = Field(sa_type=LargeBinary)
    model: str = Field(default="")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )
