"""Event model for producer and consumer observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.
    The push-channel server records from its own thread while transform
    cycles record from the producer thread.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Transform events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransformCompleted:
    """A transform cycle reduced the record set into a snapshot.

    Attributes:
        records: Number of input records.
        pages: Number of page descriptors produced.
        props: Number of shared props produced.
        dropped: Number of records dropped for unresolved path fields.
        duration_ms: Time spent transforming in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    records: int
    pages: int
    props: int
    dropped: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PageDropped:
    """A record was left out because its path template did not resolve.

    Attributes:
        field: The placeholder field that was missing or falsy.
        model_name: The record's metadata model name, if any.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    field: str
    model_name: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Cache events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SnapshotWritten:
    """The producer wrote a snapshot to the cache file.

    Attributes:
        path: Cache file path.
        size_bytes: Encoded snapshot size.
        pages: Number of pages in the snapshot.
        duration_ms: Time spent encoding and writing.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    size_bytes: int
    pages: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CacheRead:
    """A consumer read (or failed to find) the cache file.

    Attributes:
        path: Cache file path.
        retries: Number of retries before the file was found or the read gave up.
        found: Whether the file was read.
        duration_ms: Total time including backoff.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    retries: int
    found: bool
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Push-channel events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WakeBroadcast:
    """A wake token was pushed to connected listeners.

    Attributes:
        token: The token sent.
        clients_notified: Number of connections the token was handed to.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    token: str
    clients_notified: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ConnectionEvent:
    """Push-channel connection lifecycle.

    Attributes:
        client_id: Connection identifier.
        kind: What happened on the connection.
        detail: Received message text, for ``message`` events.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    client_id: str
    kind: Literal["connected", "message", "disconnected"]
    detail: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type FolioEvent = (
    TransformCompleted
    | PageDropped
    | SnapshotWritten
    | CacheRead
    | WakeBroadcast
    | ConnectionEvent
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
