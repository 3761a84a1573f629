"""Exact cosine-similarity ranking over stored vectors."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from stemnotes.config import DEFAULT_LIMIT, MIN_SIMILARITY
from stemnotes.search.types import SemanticResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from stemnotes.search.types import RankCandidate


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine similarity of *a* and *b*.

    Returns exactly ``0.0`` when either vector is empty, the lengths
    differ, or either vector has zero norm.
    """
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def rank_candidates(
    query: Sequence[float],
    candidates: Iterable[RankCandidate],
    *,
    limit: int = DEFAULT_LIMIT,
    threshold: float = MIN_SIMILARITY,
) -> list[SemanticResult]:
    """Score *candidates* against *query* and keep the best *limit*.

    Only scores strictly above *threshold* survive.  Results are sorted by
    score descending, then by note id so equal scores come out in a stable
    order.
    """
    if limit < 0:
        msg = f"limit must be >= 0, got {limit}"
        raise ValueError(msg)
    if limit == 0:
        return []

    scored = [
        SemanticResult(
            note_id=candidate.note_id,
            title=candidate.title,
            score=cosine_similarity(query, candidate.vector),
        )
        for candidate in candidates
    ]
    # NaN never compares greater, so NaN scores drop out here too.
    kept = [r for r in scored if r.score > threshold]
    kept.sort(key=lambda r: (-r.score, r.note_id))
    return kept[:limit]


class SimilarityRanker:
    """Ranks candidates with a fixed threshold and default result limit."""

    def __init__(
        self,
        *,
        threshold: float = MIN_SIMILARITY,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._threshold = threshold
        self._default_limit = default_limit

    def rank(
        self,
        query: Sequence[float],
        candidates: Iterable[RankCandidate],
        limit: int | None = None,
    ) -> list[SemanticResult]:
        """Rank *candidates* against *query*; *limit* defaults to the ranker's."""
        return rank_candidates(
            query,
            candidates,
            limit=self._default_limit if limit is None else limit,
            threshold=self._threshold,
        )

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def default_limit(self) -> int:
        return self._default_limit
