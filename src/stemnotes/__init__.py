"""stemnotes: local notes with semantic search.

Note storage on SQLite and a local embedding index served by Ollama.
"""

__version__ = "0.1.0"

from stemnotes._notebook import Notebook
from stemnotes.config import SearchConfig
from stemnotes.database import Database
from stemnotes.events import EventBus, EventType, NoteEvent
from stemnotes.exceptions import (
    NoteNotFoundError,
    ProviderError,
    ProviderResponseError,
    ProviderStatusError,
    ProviderTimeoutError,
    ProviderUnreachableError,
    StemError,
    StorageError,
)
from stemnotes.notes import NoteService
from stemnotes.search import (
    EmbeddingProvider,
    EmbeddingRecord,
    EmbeddingStore,
    IndexScheduler,
    RankCandidate,
    RetrievalPipeline,
    SemanticResult,
    SimilarityRanker,
    cosine_similarity,
    decode_vector,
    encode_vector,
    rank_candidates,
)
from stemnotes.search.providers.ollama import OllamaEmbedding

__all__ = [
    "Database",
    "EmbeddingProvider",
    "EmbeddingRecord",
    "EmbeddingStore",
    "EventBus",
    "EventType",
    "IndexScheduler",
    "NoteEvent",
    "NoteNotFoundError",
    "NoteService",
    "Notebook",
    "OllamaEmbedding",
    "ProviderError",
    "ProviderResponseError",
    "ProviderStatusError",
    "ProviderTimeoutError",
    "ProviderUnreachableError",
    "RankCandidate",
    "RetrievalPipeline",
    "SearchConfig",
    "SemanticResult",
    "SimilarityRanker",
    "StemError",
    "StorageError",
    "__version__",
    "cosine_similarity",
    "decode_vector",
    "encode_vector",
    "rank_candidates",
]
