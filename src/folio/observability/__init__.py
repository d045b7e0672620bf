"""Observability — structured events for transform, cache and push channel.

All events are frozen dataclasses with nanosecond timestamps, safe to record
from the producer thread and the push-channel server thread at once.

Quick Start:
    >>> from folio.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> # Pass collector to Producer / CacheStore / ChangeNotifier

"""

from folio.observability.collector import StackCollector
from folio.observability.events import (
    CacheRead,
    ConnectionEvent,
    FolioEvent,
    PageDropped,
    SnapshotWritten,
    TransformCompleted,
    WakeBroadcast,
    now_ns,
)
from folio.observability.log import EventLog

__all__ = [
    "CacheRead",
    "ConnectionEvent",
    "EventLog",
    "FolioEvent",
    "PageDropped",
    "SnapshotWritten",
    "StackCollector",
    "TransformCompleted",
    "WakeBroadcast",
    "now_ns",
]
