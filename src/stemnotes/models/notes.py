"""Note model — the note collaborator the search index joins against."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

DEFAULT_TITLE = "Sans titre"


class Note(SQLModel, table=True):
    """A single note.  Titles are shown next to semantic search hits."""

    __tablename__ = "notes"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str = Field(default=DEFAULT_TITLE)
    content: str | None = Field(default=None)
    is_pinned: bool = Field(default=False)
    folder_id: str | None = Field(default=None, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )
