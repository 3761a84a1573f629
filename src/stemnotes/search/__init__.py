"""Semantic search layer — codec, store, ranking, providers and pipeline."""

from stemnotes.search._pipeline import RetrievalPipeline
from stemnotes.search._scheduler import IndexScheduler
from stemnotes.search.codec import decode_vector, encode_vector
from stemnotes.search.protocols import EmbeddingProvider
from stemnotes.search.ranking import SimilarityRanker, cosine_similarity, rank_candidates
from stemnotes.search.store import EmbeddingStore
from stemnotes.search.types import EmbeddingRecord, RankCandidate, SemanticResult

__all__ = [
    "EmbeddingProvider",
    "EmbeddingRecord",
    "EmbeddingStore",
    "IndexScheduler",
    "RankCandidate",
    "RetrievalPipeline",
    "SemanticResult",
    "SimilarityRanker",
    "cosine_similarity",
    "decode_vector",
    "encode_vector",
    "rank_candidates",
]
