"""Search layer protocols."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Async protocol for text-to-vector embedding.

    The model is chosen per call so a single provider (and its connection
    pool) serves every model the server hosts.  Implementations raise
    :class:`~stemnotes.exceptions.ProviderError` subclasses on failure and
    never retry.
    """

    async def embed(
        self,
        model: str,
        text: str,
        *,
        timeout: float | None = None,
    ) -> list[float]:
        """Embed *text* with *model* and return one vector."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
