"""RetrievalPipeline — orchestrator wiring EmbeddingProvider, EmbeddingStore and ranking."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from stemnotes.config import SearchConfig
from stemnotes.search.ranking import SimilarityRanker

if TYPE_CHECKING:
    from collections.abc import Callable

    from stemnotes.search.protocols import EmbeddingProvider
    from stemnotes.search.store import EmbeddingStore
    from stemnotes.search.types import EmbeddingRecord, SemanticResult

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RetrievalPipeline:
    """Indexes notes and answers semantic queries.

    Each call is a single request/response round-trip.  The provider call
    is the only network I/O; store access runs in a worker thread via
    :func:`asyncio.to_thread` so the event loop stays responsive.  The
    store is only written after the provider response has been fully
    parsed, so a cancelled or failed call leaves it untouched.

    Provider and storage errors propagate unchanged.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        store: EmbeddingStore,
        *,
        config: SearchConfig | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._provider = provider
        self._store = store
        self._config = config or SearchConfig()
        self._ranker = SimilarityRanker(
            threshold=self._config.min_similarity,
            default_limit=self._config.default_limit,
        )
        self._clock = clock

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def index(
        self,
        note_id: str,
        text: str,
        model: str | None = None,
    ) -> EmbeddingRecord | None:
        """Embed *text* and store it as *note_id*'s embedding.

        Blank text is skipped: nothing is embedded or stored and ``None``
        is returned.
        """
        if not text.strip():
            logger.debug("Skipping embedding for note %s: empty text", note_id)
            return None

        model = model or self._config.model
        vector = await self._provider.embed(
            model, text, timeout=self._config.index_timeout
        )
        return await asyncio.to_thread(
            self._store.upsert, note_id, vector, model, self._clock()
        )

    async def search(
        self,
        query: str,
        model: str | None = None,
        limit: int | None = None,
    ) -> list[SemanticResult]:
        """Return notes semantically similar to *query*, best first.

        Blank queries return ``[]`` without contacting the provider.
        """
        if not query.strip():
            return []

        model = model or self._config.model
        vector = await self._provider.embed(
            model, query, timeout=self._config.search_timeout
        )
        candidates = await asyncio.to_thread(self._store.all_for_ranking, model)
        return self._ranker.rank(vector, candidates, limit)

    async def remove(self, note_id: str) -> bool:
        """Delete *note_id*'s embedding.  Returns True if one existed."""
        return await asyncio.to_thread(self._store.delete, note_id)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def provider(self) -> EmbeddingProvider:
        return self._provider

    @property
    def store(self) -> EmbeddingStore:
        return self._store

    @property
    def ranker(self) -> SimilarityRanker:
        return self._ranker

    @property
    def config(self) -> SearchConfig:
        return self._config
