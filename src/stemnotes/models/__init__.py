"""SQLModel database models for stemnotes."""

from stemnotes.models.embeddings import NoteEmbedding
from stemnotes.models.notes import DEFAULT_TITLE, Note

__all__ = [
    "DEFAULT_TITLE",
    "Note",
    "NoteEmbedding",
]
