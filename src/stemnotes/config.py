"""Search configuration — defaults and ``STEM_*`` environment settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "nomic-embed-text"

MIN_SIMILARITY: float = 0.3
"""Scores must exceed this to appear in search results."""

DEFAULT_LIMIT: int = 5

INDEX_TIMEOUT: float = 30.0
SEARCH_TIMEOUT: float = 15.0
INDEX_DEBOUNCE: float = 5.0


class SearchConfig(BaseSettings):
    """Settings for embedding generation and semantic search.

    Values come from keyword arguments, then ``STEM_*`` environment
    variables, then the defaults below.  Most variables are the field name
    with the prefix (``STEM_INDEX_TIMEOUT``); the Ollama URL, model and
    result limit read ``STEM_OLLAMA_URL``, ``STEM_EMBEDDING_MODEL`` and
    ``STEM_SEARCH_LIMIT``.  Malformed values raise
    :class:`pydantic.ValidationError`.

    Attributes:
        base_url: Base URL of the Ollama server.
        model: Embedding model tag used for indexing and queries.
        min_similarity: Candidates must score strictly above this.
        default_limit: Result count when a search passes no limit.
        index_timeout: Provider timeout (seconds) when indexing a note.
        search_timeout: Provider timeout (seconds) when embedding a query.
        index_debounce: Delay (seconds) between the last save of a note
            and its background re-indexing.
        auto_index: Index notes automatically when they are saved.
    """

    base_url: str = Field(DEFAULT_BASE_URL, validation_alias="STEM_OLLAMA_URL")
    model: str = Field(DEFAULT_MODEL, validation_alias="STEM_EMBEDDING_MODEL")
    min_similarity: float = MIN_SIMILARITY
    default_limit: int = Field(DEFAULT_LIMIT, ge=0, validation_alias="STEM_SEARCH_LIMIT")
    index_timeout: float = Field(INDEX_TIMEOUT, gt=0)
    search_timeout: float = Field(SEARCH_TIMEOUT, gt=0)
    index_debounce: float = Field(INDEX_DEBOUNCE, ge=0)
    auto_index: bool = True

    model_config = SettingsConfigDict(
        env_prefix="STEM_",
        env_ignore_empty=True,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def with_overrides(self, **overrides: Any) -> SearchConfig:
        """Return a copy with *overrides* applied (``None`` values ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=changes) if changes else self
