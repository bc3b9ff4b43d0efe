"""Exceptions raised by the location service."""
from __future__ import annotations


class LocationServiceError(Exception):
    """Base service exception."""


class ConfigurationError(LocationServiceError):
    """Raised at startup when mandatory configuration is missing."""


class LocationValidationError(LocationServiceError):
    """Raised when a location request body is rejected.

    ``errors`` holds every human readable violation found, not only the first.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class DependencyUnavailableError(LocationServiceError):
    """Raised when a mandatory store does not answer its health probe."""


class PrimaryStoreError(LocationServiceError):
    """Raised when the document store rejects or fails a write."""


class SecondaryWriteError(LocationServiceError):
    """Raised when the relational store write fails. Never reaches a caller."""
