"""
In-Memory Transport: Loopback Implementation of SocketTransport

Behaves like a well-mannered server without any network:
- Session ids are handed out as s1, s2, ...
- connect pushes a "connected" status onto the inbound feed,
  disconnect pushes "disconnected"
- Server-side events only reach the feed for listened event names
- Every call is recorded for inspection
- Failures can be scripted per operation

Validation mirrors the native bridges: empty or non http/ws urls raise
SocketInvalidUrlError, empty event names raise SocketEventError /
SocketEmissionError.

Example:
    transport = InMemoryTransport()
    manager = SessionManager(transport)
    await manager.connect("http://localhost:3001", on_session_id=print)
    await transport.server_emit("chat", {"text": "hi"})
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict, deque
from typing import Any, AsyncIterator, Optional

from socket_session.core.errors import (
    SocketEmissionError,
    SocketEventError,
    SocketNotConnectedError,
)
from socket_session.core.options import ConnectionOptions
from socket_session.core.types import EventData
from socket_session.transport.protocols import (
    InboundMessage,
    event_message,
    status_message,
    validate_url,
)

logger = logging.getLogger(__name__)


class InMemoryTransport:
    """
    Loopback transport for tests, demos and offline development.

    Attributes:
        calls: (operation, *arguments) tuples in call order
        emitted: (event, data) pairs accepted by emit()
    """

    __slots__ = (
        "calls",
        "emitted",
        "_feed",
        "_failures",
        "_connected",
        "_listened",
        "_session_counter",
        "_session_id",
        "_auto_status",
    )

    def __init__(self, auto_status: bool = True) -> None:
        """
        Args:
            auto_status: push connected/disconnected status messages on
                connect/disconnect, as a real client does
        """
        self.calls: list[tuple[Any, ...]] = []
        self.emitted: list[tuple[str, EventData]] = []
        self._feed: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self._failures: dict[str, deque[BaseException]] = defaultdict(deque)
        self._connected = False
        self._listened: set[str] = set()
        self._session_counter = 0
        self._session_id = ""
        self._auto_status = auto_status

    # -------------------------------------------------------------------------
    # Scripting
    # -------------------------------------------------------------------------
    def fail_next(self, operation: str, error: BaseException) -> None:
        """Make the next call to `operation` raise `error`."""
        self._failures[operation].append(error)

    def drop_connection(self) -> None:
        """Lose the session silently, as a dropped socket would."""
        self._connected = False

    def _check_failure(self, operation: str) -> None:
        pending = self._failures.get(operation)
        if pending:
            raise pending.popleft()

    # -------------------------------------------------------------------------
    # SocketTransport
    # -------------------------------------------------------------------------
    async def connect(
        self,
        url: str,
        options: Optional[ConnectionOptions] = None,
    ) -> str:
        self.calls.append(("connect", url, options))
        validate_url(url)
        self._check_failure("connect")

        self._session_counter += 1
        self._session_id = f"s{self._session_counter}"
        self._connected = True
        self._listened.clear()
        logger.debug("Loopback session %s opened for %s", self._session_id, url)

        if self._auto_status:
            self.push(status_message("connected", socketId=self._session_id))
        return self._session_id

    async def listen(self, event: str) -> None:
        self.calls.append(("listen", event))
        if not event:
            raise SocketEventError.empty_name()
        self._check_failure("listen")
        if not self._connected:
            raise SocketNotConnectedError.default()
        self._listened.add(event)

    async def unlisten(self, event: str) -> None:
        self.calls.append(("unlisten", event))
        if not event:
            raise SocketEventError.empty_name()
        self._check_failure("unlisten")
        self._listened.discard(event)

    async def emit(self, event: str, data: EventData) -> None:
        self.calls.append(("emit", event, data))
        if not event:
            raise SocketEmissionError.empty_name()
        self._check_failure("emit")
        if not self._connected:
            raise SocketNotConnectedError.default()
        self.emitted.append((event, data))

    async def disconnect(self) -> None:
        self.calls.append(("disconnect",))
        self._check_failure("disconnect")
        was_connected = self._connected
        self._connected = False
        self._listened.clear()
        if was_connected and self._auto_status:
            self.push(status_message("disconnected"))

    async def inbound(self) -> AsyncIterator[InboundMessage]:
        while True:
            message = await self._feed.get()
            try:
                yield message
            finally:
                self._feed.task_done()

    # -------------------------------------------------------------------------
    # Server side
    # -------------------------------------------------------------------------
    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def listened(self) -> frozenset[str]:
        return frozenset(self._listened)

    def count(self, operation: str) -> int:
        """Number of recorded calls to `operation`."""
        return sum(1 for call in self.calls if call[0] == operation)

    def push(self, message: InboundMessage) -> None:
        """Queue a raw message on the inbound feed."""
        self._feed.put_nowait(message)

    async def deliver(self, message: InboundMessage) -> None:
        """
        Queue a raw message and wait until the consumer has handled it
        (and everything queued before it).

        Only call once the feed is being consumed.
        """
        self.push(message)
        await self._feed.join()

    async def flush(self) -> None:
        """Wait until the consumer has handled every queued message."""
        await self._feed.join()

    async def server_emit(self, event: str, data: EventData) -> None:
        """Deliver an event from the server if the client listens for it."""
        if event not in self._listened:
            logger.debug("Loopback dropped unlistened event %r", event)
            return
        await self.deliver(event_message(event, data))
