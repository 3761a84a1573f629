"""Custom exception hierarchy for stemnotes."""

from __future__ import annotations


class StemError(Exception):
    """Base exception for all stemnotes errors."""


class StorageError(StemError):
    """Raised on storage backend failures (DB connection, constraint, disk I/O)."""


class NoteNotFoundError(StemError):
    """Raised when a note id does not exist."""


# ------------------------------------------------------------------
# Embedding provider failures
# ------------------------------------------------------------------


class ProviderError(StemError):
    """Base class for embedding provider failures. Never retried."""


class ProviderUnreachableError(ProviderError):
    """The provider could not be reached (connection refused, DNS, reset)."""


class ProviderTimeoutError(ProviderUnreachableError):
    """The provider did not answer within the request timeout."""


class ProviderStatusError(ProviderError):
    """The provider answered with a non-success HTTP status.

    Attributes:
        status_code: HTTP status returned by the provider.
        body: Raw response body, kept for diagnosis.
    """

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Embedding provider returned HTTP {status_code}: {body}")


class ProviderResponseError(ProviderError):
    """The provider answered 2xx but the body is malformed or holds no embedding."""
