"""Snapshot cache — durable single-file handoff between producer and consumers.

The producer and its consumers never share memory.  The producer overwrites
one JSON file per transform cycle; consumers read it from scratch on every
call, polling while it does not exist yet.

Producer side:
    ``clear()`` at startup, then ``write(snapshot)`` once per cycle.  There is
    a single writer and every write completes before the wake signal goes out,
    so the file is overwritten in place rather than renamed.

Consumer side:
    ``await read()`` checks for the file, sleeping ``retry_delay`` seconds
    between checks, for at most ``max_retries`` retries.  Nothing is cached
    across calls because consumer module state is not assumed to survive
    between invocations.
"""

from __future__ import annotations

import asyncio
import json
import sys
import time
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from folio._errors import CacheNotFoundError
from folio.transform import Snapshot

if TYPE_CHECKING:
    from folio.observability.collector import StackCollector


def _json_default(value: Any) -> Any:
    """Encode the non-JSON scalars content pipelines commonly emit."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, set | frozenset):
        return list(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


class CacheStore:
    """Reads and writes the snapshot cache file.

    Args:
        path: Location of the cache file.
        retry_delay: Seconds to wait between existence checks on read.
        max_retries: Number of retries before :meth:`read` gives up.
        collector: Optional observability collector.

    """

    __slots__ = ("_collector", "_max_retries", "_path", "_retry_delay")

    def __init__(
        self,
        path: Path,
        *,
        retry_delay: float = 0.5,
        max_retries: int = 10,
        collector: StackCollector | None = None,
    ) -> None:
        self._path = Path(path)
        self._retry_delay = retry_delay
        self._max_retries = max_retries
        self._collector = collector

    @property
    def path(self) -> Path:
        """The cache file location."""
        return self._path

    def exists(self) -> bool:
        """Whether a snapshot has been written."""
        return self._path.is_file()

    # ----- Producer side -----

    def clear(self) -> bool:
        """Remove any snapshot left by a previous run.

        Returns:
            True if a file was removed.

        """
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        return True

    def write(self, snapshot: Snapshot) -> int:
        """Overwrite the cache file with *snapshot*.

        Parent directories are created as needed.  I/O and encoding errors
        propagate.

        Returns:
            Number of bytes written.

        """
        t0 = time.perf_counter()
        payload = json.dumps(snapshot.to_dict(), default=_json_default).encode("utf-8")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(payload)

        if self._collector is not None:
            self._collector.record_write(
                str(self._path),
                size_bytes=len(payload),
                pages=len(snapshot.pages),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return len(payload)

    # ----- Consumer side -----

    async def read(self) -> Snapshot:
        """Read the current snapshot, waiting for the file to appear.

        Raises:
            CacheNotFoundError: If the file is still absent after the retry budget.

        """
        t0 = time.perf_counter()
        retries = 0
        while not self.exists():
            if retries >= self._max_retries:
                self._record_read(retries, found=False, t0=t0)
                raise CacheNotFoundError(self._path, retries)
            retries += 1
            print(
                f"  cache file '{self._path}' not found, "
                f"waiting {self._retry_delay * 1000:.0f}ms and retry #{retries}",
                file=sys.stderr,
            )
            await asyncio.sleep(self._retry_delay)

        data = json.loads(self._path.read_text(encoding="utf-8"))
        self._record_read(retries, found=True, t0=t0)
        return Snapshot.from_dict(data)

    def _record_read(self, retries: int, *, found: bool, t0: float) -> None:
        if self._collector is None:
            return
        self._collector.record_read(
            str(self._path),
            retries=retries,
            found=found,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
