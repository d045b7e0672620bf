"""Data client — consumer-side view of the latest snapshot.

Used from static-site build steps and on-demand renders.  Every call reads
the cache file from scratch, so a client can be constructed per request and
no state needs to survive between invocations::

    client = DataClient.from_root("my-site/")
    paths = await client.get_static_paths()
    props = await client.get_static_props_for_page_at_path("/posts/hello")

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from folio.config_loader import load_consumer_config
from folio.store.cache import CacheStore

if TYPE_CHECKING:
    from pathlib import Path

    from folio.config import FolioConfig
    from folio.observability.collector import StackCollector
    from folio.transform import Snapshot


def props_for_path(snapshot: Snapshot, path: str) -> dict[str, Any] | None:
    """Merge shared props onto the first page whose path equals *path*.

    The page descriptor is the base; shared props override same-named keys.
    Returns None when no page matches.  Paths are compared exactly.
    """
    for page in snapshot.pages:
        if page.get("path") == path:
            return {**page, **snapshot.props}
    return None


class DataClient:
    """Fetches the snapshot and answers page queries against it.

    Args:
        store: Cache store to read from.

    """

    __slots__ = ("_store",)

    def __init__(self, store: CacheStore) -> None:
        self._store = store

    @classmethod
    def from_config(cls, config: FolioConfig, *, collector: StackCollector | None = None) -> DataClient:
        """Client reading the cache file *config* points at."""
        return cls(
            CacheStore(
                config.cache_path,
                retry_delay=config.cache_retry_delay,
                max_retries=config.cache_max_retries,
                collector=collector,
            )
        )

    @classmethod
    def from_root(cls, root: str | Path = ".", **overrides: object) -> DataClient:
        """Client for the project at *root*, honouring its folio config file."""
        return cls.from_config(load_consumer_config(root, **overrides))

    @property
    def store(self) -> CacheStore:
        """The underlying cache store."""
        return self._store

    async def get_data(self) -> Snapshot:
        """Read the current snapshot, waiting for the producer's first cycle.

        Raises:
            CacheNotFoundError: If no snapshot appears within the retry budget.

        """
        return await self._store.read()

    async def get_static_paths(self) -> list[str]:
        """All page paths in snapshot order, duplicates included."""
        snapshot = await self.get_data()
        return snapshot.paths

    async def get_static_props_for_page_at_path(self, path: str) -> dict[str, Any] | None:
        """Props for the page at *path*, with shared props merged on top."""
        snapshot = await self.get_data()
        return props_for_path(snapshot, path)
