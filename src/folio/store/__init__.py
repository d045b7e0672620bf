"""Durable snapshot storage."""

from folio.store.cache import CacheStore

__all__ = ["CacheStore"]
