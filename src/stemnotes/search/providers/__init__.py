"""Embedding providers — protocol and implementations."""

from stemnotes.search.protocols import EmbeddingProvider
from stemnotes.search.providers.ollama import OllamaEmbedding

__all__ = [
    "EmbeddingProvider",
    "OllamaEmbedding",
]
