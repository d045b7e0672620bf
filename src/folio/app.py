"""Folio application — standalone producer and consumer entry points.

The three public functions back the ``folio`` CLI:

- ``produce()`` runs the producer against a records file, optionally
  re-running a cycle on every change to that file.
- ``paths()`` and ``props()`` query the current snapshot as a consumer would.
"""

import asyncio
import sys
import threading
import time
from pathlib import Path
from typing import Any

from folio.banner import print_banner
from folio.client import DataClient
from folio.config_loader import load_config
from folio.observability.events import TransformCompleted
from folio.producer import Producer
from folio.records import load_records, watch_records


def produce(
    root: str | Path = ".",
    *,
    records: str | Path,
    watch: bool = False,
    **kwargs: Any,
) -> Producer:
    """Initialize a producer and run a transform cycle from *records*.

    With ``watch=True`` this blocks, running a new cycle each time the
    records file changes, until interrupted.  The push channel (if enabled)
    stays up while watching and is stopped on return.

    Args:
        root: Project root (where ``folio.yaml`` lives).
        records: JSON or YAML file of content records.
        watch: Keep running and re-run a cycle on every change.
        **kwargs: Override FolioConfig fields.

    Returns:
        The (closed) producer, for inspecting its event log.

    """
    config = load_config(Path(root), **kwargs)
    records_path = Path(records).resolve()

    producer = Producer(config)
    producer.initialize()
    try:
        t0 = time.perf_counter()
        data = load_records(records_path)
        producer.on_data_ready(data)
        load_ms = (time.perf_counter() - t0) * 1000

        latest = producer.collector.log.query(event_type=TransformCompleted, limit=1)
        page_count = latest[0].pages if latest else 0
        print_banner(
            config, page_count,
            record_count=len(data),
            watching=watch,
            load_ms=load_ms,
        )

        if watch:
            _watch_loop(producer, records_path)
    finally:
        producer.close()
    return producer


def _watch_loop(producer: Producer, records_path: Path) -> None:
    """Run a cycle per records-file change until Ctrl-C."""
    stop_event = threading.Event()
    try:
        for data in watch_records(records_path, stop_event):
            try:
                producer.on_data_ready(data)
            except Exception as exc:
                print(f"  Transform error: {exc}", file=sys.stderr)
                continue
            print(f"  Snapshot updated ({len(data)} records)", file=sys.stderr)
    except KeyboardInterrupt:
        stop_event.set()


def paths(root: str | Path = ".", **kwargs: Any) -> list[str]:
    """Page paths of the current snapshot for the project at *root*."""
    client = DataClient.from_root(root, **kwargs)
    return asyncio.run(client.get_static_paths())


def props(path: str, root: str | Path = ".", **kwargs: Any) -> dict[str, Any] | None:
    """Merged props for the page at *path*, or None if there is no such page."""
    client = DataClient.from_root(root, **kwargs)
    return asyncio.run(client.get_static_props_for_page_at_path(path))
