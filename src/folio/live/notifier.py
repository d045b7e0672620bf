"""Change notifier — WebSocket push channel for snapshot wake signals.

Consumers cannot share memory with the producer, so they learn about a new
snapshot through a lightweight push channel: every connection on
``/live-updates`` receives ``"hello"`` when it opens and ``"props_changed"``
after each committed transform cycle.  The token carries no payload; clients
re-fetch the snapshot through :class:`~folio.client.DataClient`.

Delivery is best-effort.  There is no queue bound, no acknowledgement and no
reconnection logic.  Inbound messages are logged and otherwise ignored.

The server runs uvicorn in a daemon thread so that a synchronous producer can
broadcast from its own thread.  Tokens are handed to each connection's event
loop with ``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.routing import WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from folio._errors import LiveUpdateError
from folio.config import DEFAULT_LIVE_UPDATE_PORT

if TYPE_CHECKING:
    import uvicorn

    from folio.observability.collector import StackCollector


LIVE_UPDATE_PATH = "/live-updates"
GREETING = "hello"
LIVE_UPDATE_EVENT_NAME = "props_changed"


@dataclass(frozen=True, slots=True)
class LiveConnection:
    """A connected push-channel client.

    Attributes:
        client_id: Unique identifier for this connection.
        queue: Tokens waiting to be sent to the client.
        loop: Event loop that owns the connection (None when created outside one).

    """

    client_id: str
    queue: asyncio.Queue[str] = field(default_factory=asyncio.Queue, compare=False, hash=False)
    loop: asyncio.AbstractEventLoop | None = field(default=None, compare=False, hash=False)


def _deliver(conn: LiveConnection, token: str) -> bool:
    """Enqueue *token* on *conn* from any thread.  False if its loop is gone."""
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None

    if conn.loop is None or conn.loop is running:
        conn.queue.put_nowait(token)
        return True
    try:
        conn.loop.call_soon_threadsafe(conn.queue.put_nowait, token)
    except RuntimeError:
        # Loop already closed: the connection is being torn down.
        return False
    return True


class ChangeNotifier:
    """Broadcasts wake tokens to every connected push-channel client.

    Thread-safe: the connection set is protected by a lock.  One instance
    lives for the producer's lifetime; it is created by the producer context
    and torn down by :meth:`stop`.

    Args:
        host: Bind address for the WebSocket server.
        port: Bind port for the WebSocket server.
        collector: Optional observability collector.

    """

    def __init__(
        self,
        *,
        host: str = "127.0.0.1",
        port: int = DEFAULT_LIVE_UPDATE_PORT,
        collector: StackCollector | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._collector = collector
        self._connections: set[LiveConnection] = set()
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self.app = Starlette(routes=[WebSocketRoute(LIVE_UPDATE_PATH, self._endpoint)])

    @property
    def url(self) -> str:
        """WebSocket URL clients connect to."""
        return f"ws://{self._host}:{self._port}{LIVE_UPDATE_PATH}"

    @property
    def subscriber_count(self) -> int:
        """Number of live connections."""
        with self._lock:
            return len(self._connections)

    @property
    def is_running(self) -> bool:
        """Whether the server thread is active."""
        return self._thread is not None and self._thread.is_alive()

    # ----- Subscriptions -----

    def subscribe(self, conn: LiveConnection) -> None:
        """Register a connection for wake tokens."""
        with self._lock:
            self._connections.add(conn)

    def unsubscribe(self, conn: LiveConnection) -> None:
        """Remove a connection.  Unknown connections are ignored."""
        with self._lock:
            self._connections.discard(conn)

    def get_connections(self) -> frozenset[LiveConnection]:
        """Snapshot of current connections (no lock held on return)."""
        with self._lock:
            return frozenset(self._connections)

    def broadcast(self, token: str = LIVE_UPDATE_EVENT_NAME) -> int:
        """Send *token* to every subscribed connection.

        Returns:
            Number of connections the token was handed to.

        """
        count = sum(1 for conn in self.get_connections() if _deliver(conn, token))
        print(f"  live-updates: sent {token!r} to {count} client(s)", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_broadcast(token, clients_notified=count)
        return count

    # ----- Server lifecycle -----

    def start(self, *, timeout: float = 5.0) -> None:
        """Serve the push channel from a background thread.

        Blocks until the server accepts connections.

        Raises:
            LiveUpdateError: If the server does not come up within *timeout*.

        """
        if self.is_running:
            return

        import uvicorn

        config = uvicorn.Config(
            self.app,
            host=self._host,
            port=self._port,
            log_level="warning",
            lifespan="off",
        )
        server = uvicorn.Server(config)
        self._server = server
        self._thread = threading.Thread(
            target=server.run,
            name="folio-live-updates",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not server.started:
            if not self._thread.is_alive():
                self._thread = None
                msg = f"push channel failed to start on {self._host}:{self._port}"
                raise LiveUpdateError(msg)
            if time.monotonic() > deadline:
                self.stop()
                msg = f"push channel did not start within {timeout}s"
                raise LiveUpdateError(msg)
            time.sleep(0.05)

    def stop(self) -> None:
        """Signal the server to exit and wait for the thread to finish."""
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None
        self._server = None

    # ----- Connection handler -----

    async def _endpoint(self, websocket: WebSocket) -> None:
        """One push-channel connection: greet, forward tokens, log inbound text."""
        await websocket.accept()
        conn = LiveConnection(client_id=uuid.uuid4().hex[:12], loop=asyncio.get_running_loop())
        self.subscribe(conn)
        self._log_connection(conn, "connected")

        forwarder: asyncio.Task[None] | None = None
        try:
            await websocket.send_text(GREETING)
            forwarder = asyncio.create_task(self._forward(websocket, conn))
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                text = message.get("text")
                if text is None:
                    text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
                self._log_connection(conn, "message", text)
        except WebSocketDisconnect:
            pass
        finally:
            self.unsubscribe(conn)
            if forwarder is not None:
                forwarder.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await forwarder
            self._log_connection(conn, "disconnected")

    async def _forward(self, websocket: WebSocket, conn: LiveConnection) -> None:
        """Send queued tokens until the socket goes away."""
        while True:
            token = await conn.queue.get()
            try:
                await websocket.send_text(token)
            except (WebSocketDisconnect, RuntimeError, OSError):
                return

    def _log_connection(self, conn: LiveConnection, kind: str, detail: str = "") -> None:
        suffix = f": {detail!r}" if detail else ""
        print(f"  live-updates: client {conn.client_id} {kind}{suffix}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_connection(conn.client_id, kind, detail)
