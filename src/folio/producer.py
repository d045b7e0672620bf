"""Producer — the content pipeline's side of the handoff.

A :class:`Producer` is the explicitly constructed context that owns the cache
store, the optional push channel and the observability collector for the
lifetime of the hosting process.  The pipeline calls two entry points:

``initialize()``
    Once at startup.  Deletes any snapshot left by a previous run so that
    consumers never see stale data, and starts the push channel when live
    updates are enabled.

``on_data_ready(records)``
    Once per upstream "data ready" event.  Runs one cycle::

        transform -> augment props -> write cache file -> broadcast wake token

    The write completes before the broadcast, so a consumer reacting to the
    token reads the new snapshot.  Cycles never overlap.  An exception from
    a rule function aborts the cycle before anything is written.

Usage::

    with Producer(load_config(root)) as producer:
        producer.on_data_ready(records)

"""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import replace
from typing import TYPE_CHECKING

from folio.live.notifier import LIVE_UPDATE_EVENT_NAME, ChangeNotifier
from folio.observability.collector import StackCollector
from folio.store.cache import CacheStore
from folio.transform import transform

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from folio._errors import MissingFieldError
    from folio._types import ContentObject
    from folio.config import FolioConfig
    from folio.transform import Snapshot


class Producer:
    """Runs transform cycles and publishes their snapshots.

    Args:
        config: Resolved FolioConfig.
        collector: Observability collector (a fresh one is created if omitted).
        notifier: Push channel to broadcast through.  Created from *config*
            when live updates are enabled and none is given.

    """

    def __init__(
        self,
        config: FolioConfig,
        *,
        collector: StackCollector | None = None,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self._config = config
        self._collector = collector if collector is not None else StackCollector()
        self._store = CacheStore(
            config.cache_path,
            retry_delay=config.cache_retry_delay,
            max_retries=config.cache_max_retries,
            collector=self._collector,
        )
        if notifier is None and config.live_update:
            notifier = ChangeNotifier(
                host=config.live_update_host,
                port=config.live_update_ws_port,
                collector=self._collector,
            )
        self._notifier = notifier
        self._cycle_lock = threading.Lock()
        self._cycles = 0

    @property
    def config(self) -> FolioConfig:
        return self._config

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def notifier(self) -> ChangeNotifier | None:
        return self._notifier

    @property
    def collector(self) -> StackCollector:
        return self._collector

    @property
    def cycles(self) -> int:
        """Number of completed transform cycles."""
        return self._cycles

    # ----- Lifecycle -----

    def initialize(self) -> None:
        """Remove any stale snapshot and start the push channel if enabled."""
        if self._store.clear():
            print(f"  Removed stale snapshot {self._store.path}", file=sys.stderr)
        if self._config.live_update and self._notifier is not None:
            self._notifier.start()

    def close(self) -> None:
        """Stop the push channel.  The last snapshot stays on disk."""
        if self._notifier is not None:
            self._notifier.stop()

    def __enter__(self) -> Producer:
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ----- Transform cycle -----

    def on_data_ready(self, records: Sequence[ContentObject]) -> Sequence[ContentObject]:
        """Run one transform cycle for *records* and return them unchanged."""
        with self._cycle_lock:
            snapshot = self._transform(records)
            self._store.write(snapshot)
            if self._config.live_update and self._notifier is not None:
                self._notifier.broadcast(LIVE_UPDATE_EVENT_NAME)
            self._cycles += 1
        return records

    def _transform(self, records: Sequence[ContentObject]) -> Snapshot:
        t0 = time.perf_counter()
        dropped = 0

        def _on_drop(exc: MissingFieldError) -> None:
            nonlocal dropped
            dropped += 1
            self._collector.record_drop(exc.field, exc.record)

        snapshot = transform(
            records,
            common_props=self._config.common_props,
            pages=self._config.pages,
            on_drop=_on_drop,
        )
        self._collector.record_transform(
            records=len(records),
            pages=len(snapshot.pages),
            props=len(snapshot.props),
            dropped=dropped,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

        if self._config.live_update:
            snapshot = replace(
                snapshot,
                props={
                    **snapshot.props,
                    "liveUpdate": True,
                    "liveUpdateWsPort": self._config.client_port,
                    "liveUpdateEventName": LIVE_UPDATE_EVENT_NAME,
                },
            )
        return snapshot


# ---------------------------------------------------------------------------
# Entry points for the hosting pipeline
# ---------------------------------------------------------------------------


def initialize(config: FolioConfig, **kwargs: object) -> Producer:
    """Create and initialize a producer for *config*.

    The caller owns the returned context and should ``close()`` it at exit.
    """
    producer = Producer(config, **kwargs)  # type: ignore[arg-type]
    producer.initialize()
    return producer


def on_data_ready(producer: Producer, records: Sequence[ContentObject]) -> Sequence[ContentObject]:
    """Run one transform cycle through *producer*; returns *records* unchanged."""
    return producer.on_data_ready(records)
