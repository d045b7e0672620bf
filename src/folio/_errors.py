"""Folio error hierarchy.

All folio-specific errors inherit from FolioError for easy catching.
"""

from __future__ import annotations

import reprlib
from pathlib import Path
from typing import Any


class FolioError(Exception):
    """Base error for all folio operations."""


class ConfigError(FolioError):
    """Invalid or missing configuration."""


class TransformError(FolioError):
    """Error while reducing content records into a snapshot."""


class MissingFieldError(TransformError):
    """A path template placeholder resolved to a missing or falsy value.

    Caught by the page reducer, which drops the offending record.

    Attributes:
        field: The dotted field path that failed to resolve.
        record: The content record the template was resolved against.

    """

    def __init__(self, field: str, record: Any) -> None:
        self.field = field
        self.record = record
        super().__init__(
            f"page has no value in field {field!r}, page: {reprlib.repr(record)}"
        )


class CacheError(FolioError):
    """Error in the snapshot cache file."""


class CacheNotFoundError(CacheError):
    """The snapshot cache file did not appear within the retry budget.

    Attributes:
        path: The cache file that was polled.
        attempts: Number of retries performed before giving up.

    """

    def __init__(self, path: Path, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(
            f"cache file '{path}' was not found after {attempts} retries"
        )


class LiveUpdateError(FolioError):
    """Error in the live-update push channel."""
