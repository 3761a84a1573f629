"""Search layer data types — value objects for stored vectors and results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class EmbeddingRecord:
    """A note's stored embedding.

    Attributes:
        note_id: Identifier of the owning note.
        vector: Decoded embedding vector.
        model: Tag of the model that produced *vector*.
        updated_at: When the vector was last (re)generated, in UTC.
    """

    note_id: str
    vector: list[float]
    model: str
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class RankCandidate:
    """A stored vector paired with its note's title, ready for ranking."""

    note_id: str
    vector: list[float]
    title: str


@dataclass(frozen=True, slots=True)
class SemanticResult:
    """A single semantic search hit.

    Attributes:
        note_id: Identifier of the matched note.
        title: Title of the matched note.
        score: Cosine similarity to the query, above the search threshold.
    """

    note_id: str
    title: str
    score: float
