"""Exceptions raised by the ingestion pipeline.

FetchExhausted and MalformedInput abort a batch before any row is imported.
RowValidationFailure and PersistenceFailure are row-scoped: the batch
importer counts them and moves on to the next row.
"""

from typing import Optional


class IngestionError(Exception):
    """Base exception for the ingestion pipeline."""


class SourceHTTPError(IngestionError):
    """Non-2xx response from the rating source."""

    def __init__(self, status_code: int, url: str, reason: str = ""):
        self.status_code = status_code
        self.url = url
        self.reason = reason
        label = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        super().__init__(f"{label} for {url}")

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class FetchExhausted(IngestionError):
    """All fetch attempts failed, or a terminal failure (4xx/timeout) occurred."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException]):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to fetch {url} after {attempts} attempt(s): {last_error}"
        )


class MalformedInput(IngestionError):
    """Tabular payload could not be parsed at all."""


class RowValidationFailure(IngestionError):
    """One row failed field normalization."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message)


class PersistenceFailure(IngestionError):
    """Transaction for one row failed and was rolled back."""
