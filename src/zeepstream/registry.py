"""Thread-safe registry of live client connections.

The network context adds and removes connections while the tick context
broadcasts; a single lock guards the map and every pass iterates over a
copy, so removal during a broadcast never skips or revisits an entry.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from collections.abc import Callable
from typing import Protocol

from aiohttp import WSCloseCode, web

from zeepstream.codec import Frame
from zeepstream.exceptions import ZeepTransportError

_logger = logging.getLogger(__name__)


def new_connection_id() -> str:
    """Return an id unique for the lifetime of the process."""
    return uuid.uuid4().hex


class Connection(Protocol):
    """A live client socket as seen by the registry.

    ``send`` and ``close`` must not block; ``send`` raises
    :class:`ZeepTransportError` when the payload cannot be handed off.
    """

    @property
    def id(self) -> str: ...

    @property
    def is_available(self) -> bool: ...

    def send(self, payload: Frame) -> None: ...

    def close(self) -> None: ...


class WebSocketConnection:
    """:class:`Connection` backed by an aiohttp server-side WebSocket.

    Sends are scheduled onto the owning event loop with
    ``call_soon_threadsafe``, so they can be issued from the host's tick
    thread.  A send that fails asynchronously marks the connection
    unavailable; the next broadcast pass prunes it.

    At most one send is in flight.  Frames arriving meanwhile replace each
    other, so a slow client misses frames instead of queueing them;
    superseded frames are counted in :attr:`dropped`.
    """

    def __init__(
        self,
        ws: web.WebSocketResponse,
        loop: asyncio.AbstractEventLoop,
        *,
        remote: str | None = None,
        connection_id: str | None = None,
    ) -> None:
        self._ws = ws
        self._loop = loop
        self._id = connection_id or new_connection_id()
        self.remote = remote
        self._failed = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._sending = False
        self._pending: Frame | None = None
        self.dropped = 0

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_available(self) -> bool:
        return not self._failed and not self._ws.closed

    def __repr__(self) -> str:
        return f"WebSocketConnection(id={self._id!r}, remote={self.remote!r})"

    def send(self, payload: Frame) -> None:
        if not self.is_available:
            raise ZeepTransportError("connection is closed", connection_id=self._id)
        try:
            self._loop.call_soon_threadsafe(self._spawn_send, payload)
        except RuntimeError as exc:
            # Event loop already closed.
            self._failed = True
            raise ZeepTransportError(f"cannot schedule send: {exc}", connection_id=self._id) from exc

    def close(self) -> None:
        self._failed = True
        if self._ws.closed:
            return
        try:
            self._loop.call_soon_threadsafe(self._spawn_close)
        except RuntimeError:
            _logger.debug("Event loop closed before connection %s could be closed", self._id)

    async def aclose(self, *, code: int = WSCloseCode.OK, message: bytes = b"") -> None:
        """Close the socket and wait for the closing handshake."""
        self._failed = True
        if self._ws.closed:
            return
        try:
            await self._ws.close(code=code, message=message)
        except (ConnectionError, RuntimeError):
            _logger.debug("Close of %s failed", self._id, exc_info=True)

    def _spawn_send(self, payload: Frame) -> None:
        # One send in flight; while it is pending only the newest frame waits.
        if self._sending:
            if self._pending is not None:
                self.dropped += 1
            self._pending = payload
            return
        self._sending = True
        self._track(self._loop.create_task(self._send_latest(payload)))

    def _spawn_close(self) -> None:
        self._track(self._loop.create_task(self.aclose()))

    def _track(self, task: asyncio.Task[None]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send_latest(self, payload: Frame) -> None:
        next_payload: Frame | None = payload
        try:
            while next_payload is not None and not self._failed:
                await self._send(next_payload)
                next_payload, self._pending = self._pending, None
        finally:
            self._sending = False
            self._pending = None

    async def _send(self, payload: Frame) -> None:
        try:
            if isinstance(payload, str):
                await self._ws.send_str(payload)
            else:
                await self._ws.send_bytes(payload)
        except (ConnectionError, RuntimeError) as exc:
            self._failed = True
            _logger.debug("Send to %s failed: %s", self._id, exc)


class ConnectionRegistry:
    """Set of live connections keyed by connection id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: dict[str, Connection] = {}

    def add(self, conn: Connection) -> None:
        with self._lock:
            self._connections[conn.id] = conn
            total = len(self._connections)
        _logger.debug("Connection %s registered total=%d", conn.id, total)

    def remove(self, conn_id: str) -> Connection | None:
        """Deregister *conn_id*; returns the connection if it was present."""
        with self._lock:
            conn = self._connections.pop(conn_id, None)
            total = len(self._connections)
        if conn is not None:
            _logger.debug("Connection %s removed total=%d", conn_id, total)
        return conn

    def get(self, conn_id: str) -> Connection | None:
        with self._lock:
            return self._connections.get(conn_id)

    def count(self) -> int:
        with self._lock:
            return len(self._connections)

    __len__ = count

    def __contains__(self, conn_id: object) -> bool:
        with self._lock:
            return conn_id in self._connections

    def snapshot(self) -> list[Connection]:
        """Copy of the currently registered connections."""
        with self._lock:
            return list(self._connections.values())

    def for_each(self, fn: Callable[[Connection], None]) -> None:
        """Call *fn* for every connection registered at call time."""
        for conn in self.snapshot():
            fn(conn)

    def clear(self) -> list[Connection]:
        """Deregister everything and return what was registered."""
        with self._lock:
            conns = list(self._connections.values())
            self._connections.clear()
        return conns

    def close_all(self) -> None:
        for conn in self.clear():
            conn.close()

    def broadcast(self, payload: Frame) -> int:
        """Send *payload* to every registered connection.

        Connections that report unavailable or fail to send are closed and
        deregistered during this pass.  The membership check and the send
        happen under the lock, so a connection removed by another thread is
        never sent to afterwards.

        Returns
        -------
        int
            Number of connections the payload was handed to.
        """
        delivered = 0
        for conn in self.snapshot():
            with self._lock:
                if self._connections.get(conn.id) is not conn:
                    continue
                reason: str | None = None
                if not conn.is_available:
                    reason = "not available"
                else:
                    try:
                        conn.send(payload)
                    except (ZeepTransportError, OSError) as exc:
                        reason = str(exc) or type(exc).__name__
                if reason is None:
                    delivered += 1
                    continue
                del self._connections[conn.id]
            _logger.warning("Removing dead connection %s: %s", conn.id, reason)
            conn.close()
        return delivered
