"""OllamaEmbedding — async embedding provider backed by a local Ollama server."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from stemnotes.config import DEFAULT_BASE_URL, INDEX_TIMEOUT
from stemnotes.exceptions import (
    ProviderError,
    ProviderResponseError,
    ProviderStatusError,
    ProviderTimeoutError,
    ProviderUnreachableError,
)

logger = logging.getLogger(__name__)

EMBED_PATH = "/api/embed"


class OllamaEmbedding:
    """Embedding provider that calls Ollama's ``/api/embed`` endpoint.

    One :class:`httpx.AsyncClient` is shared by all calls, so concurrent
    indexing and search reuse the same connection pool.  Pass *client* to
    supply your own (it is then left open by :meth:`close`).

    Failures map onto the provider exception hierarchy:

    - timeouts raise :class:`ProviderTimeoutError`
    - connection failures raise :class:`ProviderUnreachableError`
    - non-2xx answers raise :class:`ProviderStatusError`
    - undecodable or unparsable bodies, and bodies without a usable
      vector, raise :class:`ProviderResponseError`
    - any other httpx failure raises :class:`ProviderError`
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = INDEX_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    # EmbeddingProvider protocol
    # ------------------------------------------------------------------

    async def embed(
        self,
        model: str,
        text: str,
        *,
        timeout: float | None = None,
    ) -> list[float]:
        """Embed *text* with *model*; only the first returned vector is used."""
        payload = await self._post(
            {"model": model, "input": text},
            self._timeout if timeout is None else timeout,
        )
        return self._first_embedding(payload)

    async def close(self) -> None:
        """Close the underlying httpx client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}{EMBED_PATH}"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _post(self, body: dict[str, Any], timeout: float) -> Any:
        try:
            response = await self._client.post(self.endpoint, json=body, timeout=timeout)
        except httpx.TimeoutException as exc:
            msg = f"Embedding request to {self.endpoint} timed out after {timeout}s"
            raise ProviderTimeoutError(msg) from exc
        except httpx.TransportError as exc:
            msg = f"Embedding provider unreachable at {self.endpoint}: {exc}"
            raise ProviderUnreachableError(msg) from exc
        except httpx.DecodingError as exc:
            msg = f"Failed to decode embedding response: {exc}"
            raise ProviderResponseError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Embedding request to {self.endpoint} failed: {exc}"
            raise ProviderError(msg) from exc

        if not response.is_success:
            logger.debug(
                "Ollama embed failed: %s %s", response.status_code, response.text
            )
            raise ProviderStatusError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            msg = f"Failed to parse embedding response: {exc}"
            raise ProviderResponseError(msg) from exc

    @staticmethod
    def _first_embedding(payload: Any) -> list[float]:
        if not isinstance(payload, dict) or "embeddings" not in payload:
            msg = "Embedding response has no 'embeddings' field"
            raise ProviderResponseError(msg)

        embeddings = payload["embeddings"]
        if not isinstance(embeddings, list):
            msg = "Embedding response 'embeddings' is not a list"
            raise ProviderResponseError(msg)
        if not embeddings:
            msg = "No embedding returned"
            raise ProviderResponseError(msg)

        first = embeddings[0]
        if not isinstance(first, list) or not all(
            isinstance(x, (int, float)) and not isinstance(x, bool) for x in first
        ):
            msg = "Embedding response vector is not a list of numbers"
            raise ProviderResponseError(msg)
        return [float(x) for x in first]
