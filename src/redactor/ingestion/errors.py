"""Ingestion error taxonomy.

A duplicate fingerprint is not an error; the store reports it as
``UpsertResult.DUPLICATE``.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for pipeline errors."""


class TransportError(IngestionError):
    """A backend could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(IngestionError):
    """Expected structure was absent from a response, or a canonical invariant failed."""


class PersistenceError(IngestionError):
    """The article store failed for a reason other than a duplicate fingerprint."""
