"""Tests for OllamaEmbedding — request shape and error mapping."""

from __future__ import annotations

import json

import httpx
import pytest

from stemnotes.exceptions import (
    ProviderError,
    ProviderResponseError,
    ProviderStatusError,
    ProviderTimeoutError,
    ProviderUnreachableError,
)
from stemnotes.search.protocols import EmbeddingProvider
from stemnotes.search.providers.ollama import OllamaEmbedding

# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _provider(handler) -> OllamaEmbedding:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OllamaEmbedding("http://ollama.test:11434/", client=client)


def _json_handler(payload, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return handler


# ==================================================================
# Successful calls
# ==================================================================


class TestEmbed:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3]]})

        provider = _provider(handler)
        await provider.embed("nomic-embed-text", "hello world")

        (request,) = seen
        assert request.method == "POST"
        assert str(request.url) == "http://ollama.test:11434/api/embed"
        assert json.loads(request.content) == {
            "model": "nomic-embed-text",
            "input": "hello world",
        }

    @pytest.mark.asyncio
    async def test_returns_first_vector(self):
        provider = _provider(_json_handler({"embeddings": [[1.0, 2.0], [3.0, 4.0]]}))
        assert await provider.embed("m", "text") == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_integer_components_become_floats(self):
        provider = _provider(_json_handler({"embeddings": [[1, 0, -1]]}))
        result = await provider.embed("m", "text")
        assert result == [1.0, 0.0, -1.0]
        assert all(isinstance(x, float) for x in result)

    @pytest.mark.asyncio
    async def test_extra_fields_ignored(self):
        payload = {"model": "m", "embeddings": [[0.5]], "total_duration": 123}
        provider = _provider(_json_handler(payload))
        assert await provider.embed("m", "text") == [0.5]

    def test_satisfies_protocol(self):
        provider = _provider(_json_handler({"embeddings": [[1.0]]}))
        assert isinstance(provider, EmbeddingProvider)

    def test_endpoint_strips_trailing_slash(self):
        provider = _provider(_json_handler({}))
        assert provider.base_url == "http://ollama.test:11434"
        assert provider.endpoint == "http://ollama.test:11434/api/embed"


# ==================================================================
# Error mapping
# ==================================================================


class TestErrors:
    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderUnreachableError, match="unreachable"):
            await _provider(handler).embed("m", "text")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await _provider(handler).embed("m", "text", timeout=15.0)
        assert isinstance(exc_info.value, ProviderUnreachableError)
        assert "15.0s" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text='{"error":"model \\"nope\\" not found"}')

        with pytest.raises(ProviderStatusError) as exc_info:
            await _provider(handler).embed("nope", "text")
        assert exc_info.value.status_code == 404
        assert "not found" in exc_info.value.body
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_server_error(self):
        provider = _provider(_json_handler({"error": "boom"}, status_code=500))
        with pytest.raises(ProviderStatusError) as exc_info:
            await provider.embed("m", "text")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_unparsable_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json at all")

        with pytest.raises(ProviderResponseError, match="parse"):
            await _provider(handler).embed("m", "text")

    @pytest.mark.asyncio
    async def test_corrupt_content_encoding(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"
            )

        with pytest.raises(ProviderResponseError, match="decode"):
            await _provider(handler).embed("m", "text")

    @pytest.mark.asyncio
    async def test_other_httpx_errors_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TooManyRedirects("redirect loop", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).embed("m", "text")
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    @pytest.mark.asyncio
    async def test_empty_embeddings(self):
        provider = _provider(_json_handler({"embeddings": []}))
        with pytest.raises(ProviderResponseError, match="No embedding returned"):
            await provider.embed("m", "text")

    @pytest.mark.asyncio
    async def test_missing_embeddings_field(self):
        provider = _provider(_json_handler({"embedding": [0.1, 0.2]}))
        with pytest.raises(ProviderResponseError):
            await provider.embed("m", "text")

    @pytest.mark.asyncio
    async def test_wrong_vector_type(self):
        provider = _provider(_json_handler({"embeddings": [["a", "b"]]}))
        with pytest.raises(ProviderResponseError):
            await provider.embed("m", "text")

    @pytest.mark.asyncio
    async def test_all_errors_share_base(self):
        provider = _provider(_json_handler({"embeddings": []}))
        with pytest.raises(ProviderError):
            await provider.embed("m", "text")


# ==================================================================
# Lifecycle
# ==================================================================


class TestClose:
    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(_json_handler({})))
        provider = OllamaEmbedding(client=client)
        await provider.close()
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        provider = OllamaEmbedding()
        await provider.close()
        assert provider._client.is_closed
