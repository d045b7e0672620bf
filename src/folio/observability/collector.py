"""Stack collector — the single recording point for folio events.

Components take an optional collector and call the ``record_*`` method for
what they just did.  Events land in one shared :class:`EventLog`.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from typing import Any

from folio.observability.events import (
    CacheRead,
    ConnectionEvent,
    PageDropped,
    SnapshotWritten,
    TransformCompleted,
    WakeBroadcast,
    now_ns,
)
from folio.observability.log import EventLog


class StackCollector:
    """Event collector shared by the producer, the cache and the notifier.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Transform -----

    def record_transform(
        self,
        *,
        records: int,
        pages: int,
        props: int,
        dropped: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a completed transform cycle."""
        self._log.append(
            TransformCompleted(
                records=records,
                pages=pages,
                props=props,
                dropped=dropped,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_drop(self, field: str, record: Any) -> None:
        """Record a record dropped for an unresolved path field."""
        model_name = ""
        if isinstance(record, dict):
            metadata = record.get("__metadata")
            if isinstance(metadata, dict):
                model_name = str(metadata.get("modelName", ""))
        self._log.append(PageDropped(field=field, model_name=model_name, timestamp_ns=now_ns()))

    # ----- Cache -----

    def record_write(
        self,
        path: str,
        *,
        size_bytes: int,
        pages: int,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a snapshot write."""
        self._log.append(
            SnapshotWritten(
                path=path,
                size_bytes=size_bytes,
                pages=pages,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_read(
        self,
        path: str,
        *,
        retries: int,
        found: bool,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a consumer read attempt."""
        self._log.append(
            CacheRead(
                path=path,
                retries=retries,
                found=found,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Push channel -----

    def record_broadcast(self, token: str, *, clients_notified: int) -> None:
        """Record a wake-token broadcast."""
        self._log.append(
            WakeBroadcast(token=token, clients_notified=clients_notified, timestamp_ns=now_ns())
        )

    def record_connection(self, client_id: str, kind: str, detail: str = "") -> None:
        """Record a push-channel connection event."""
        self._log.append(
            ConnectionEvent(
                client_id=client_id,
                kind=kind,  # type: ignore[arg-type]
                detail=detail,
                timestamp_ns=now_ns(),
            )
        )
