"""
Transport Protocol Definitions: Boundary to the Real-Time Wire Client

The session manager never touches the wire. It drives a transport through
five awaitable operations and consumes one inbound feed:

    connect(url, options) -> session id
    listen(event)
    unlisten(event)
    emit(event, data)
    disconnect()
    inbound() -> async iterator of InboundMessage

Every operation may raise a SocketError from the closed taxonomy. The
inbound feed yields plain mappings of two shapes:

    {"type": "status", "payload": {"status": "connected", "socketId": "s1"}}
    {"type": "socket_event", "payload": {"event": "chat", "data": {...}}}

Status payloads use the statuses connecting / connected / disconnected /
error (with an optional "reason").
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, AsyncIterator, Mapping, Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

from socket_session.core import constants as C
from socket_session.core.errors import SocketInvalidUrlError
from socket_session.core.options import ConnectionOptions
from socket_session.core.types import EventData

InboundMessage = Mapping[str, Any]


@runtime_checkable
class SocketTransport(Protocol):
    """
    Structural protocol for wire clients.

    Implementations must be safe to call from a single asyncio loop; the
    session manager does not serialize calls across operations.
    """

    @abstractmethod
    async def connect(
        self,
        url: str,
        options: Optional[ConnectionOptions] = None,
    ) -> str:
        """
        Open a session.

        Returns:
            The session identifier assigned by the server

        Raises:
            SocketInvalidUrlError, SocketConnectionError, SocketTimeoutError
        """
        ...

    @abstractmethod
    async def listen(self, event: str) -> None:
        """
        Start forwarding `event` onto the inbound feed.

        Raises:
            SocketEventError, SocketNotConnectedError
        """
        ...

    @abstractmethod
    async def unlisten(self, event: str) -> None:
        """Stop forwarding `event`. Raises SocketEventError."""
        ...

    @abstractmethod
    async def emit(self, event: str, data: EventData) -> None:
        """
        Send an event to the server.

        Raises:
            SocketEmissionError, SocketNotConnectedError
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the session. Raises SocketDisconnectionError."""
        ...

    @abstractmethod
    def inbound(self) -> AsyncIterator[InboundMessage]:
        """Unbounded feed of status and event messages."""
        ...


# =============================================================================
# MESSAGE BUILDERS
# =============================================================================
def status_message(status: str, **fields: Any) -> dict[str, Any]:
    """Build a status feed message, e.g. status_message("connected", socketId="s1")."""
    return {"type": C.MESSAGE_STATUS, "payload": {"status": status, **fields}}


def event_message(event: str, data: EventData) -> dict[str, Any]:
    return {"type": C.MESSAGE_SOCKET_EVENT, "payload": {"event": event, "data": data}}


# =============================================================================
# URL VALIDATION
# =============================================================================
def validate_url(url: str) -> None:
    """
    Reject urls no transport could open.

    Raises:
        SocketInvalidUrlError: url is empty, has no scheme, or its scheme
            is not an http(s) / ws(s) variant
    """
    if not url:
        raise SocketInvalidUrlError.empty()
    try:
        scheme = urlsplit(url).scheme
    except ValueError as e:
        raise SocketInvalidUrlError.malformed(url) from e
    if not scheme or not scheme.startswith(C.ACCEPTED_SCHEME_PREFIXES):
        raise SocketInvalidUrlError.malformed(url)
