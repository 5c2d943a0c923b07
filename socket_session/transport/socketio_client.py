"""
Socket.IO Transport: SocketTransport over python-socketio's AsyncClient

Translates ConnectionOptions into client settings, turns client lifecycle
events into status messages on the inbound feed, forwards listened events,
and maps library failures onto the error taxonomy.

Option mapping:
    reconnection, reconnection_attempts (-1 -> unlimited),
    reconnection_delay / _max (ms -> s), randomization_factor
                              -> AsyncClient(...)
    timeout (ms -> s)         -> connect(wait_timeout=...) and an overall
                                 deadline reported as CONNECTION_TIMEOUT
    path                      -> connect(socketio_path=...)
    transports                -> connect(transports=...), websocket always added
    auth                      -> connect(auth=...)
    query                     -> appended to the url
    secure                    -> http/ws upgraded to https/wss
    extra headers (both platforms) -> connect(headers=...)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

import socketio
from socketio import exceptions as socketio_errors

from socket_session.core import constants as C
from socket_session.core.errors import ErrorKind, SocketError, error_from_code
from socket_session.core.options import ConnectionOptions
from socket_session.core.types import EventData
from socket_session.transport.protocols import (
    InboundMessage,
    event_message,
    status_message,
    validate_url,
)

logger = logging.getLogger(__name__)

_SECURE_SCHEMES = {"http": "https", "ws": "wss"}


# =============================================================================
# OPTION TRANSLATION
# =============================================================================
def client_kwargs(options: Optional[ConnectionOptions]) -> dict[str, Any]:
    """AsyncClient constructor arguments for the supplied options."""
    kwargs: dict[str, Any] = {"logger": False}
    if options is None:
        return kwargs
    if options.reconnection is not None:
        kwargs["reconnection"] = options.reconnection
    if options.reconnection_attempts is not None:
        kwargs["reconnection_attempts"] = max(options.reconnection_attempts, 0)
    if options.reconnection_delay is not None:
        kwargs["reconnection_delay"] = options.reconnection_delay / C.SECOND_MS
    if options.reconnection_delay_max is not None:
        kwargs["reconnection_delay_max"] = options.reconnection_delay_max / C.SECOND_MS
    if options.randomization_factor is not None:
        kwargs["randomization_factor"] = options.randomization_factor
    if options.extra_ios is not None and options.extra_ios.log is not None:
        kwargs["logger"] = options.extra_ios.log
    return kwargs


def resolve_transports(options: ConnectionOptions) -> list[str]:
    ios = options.extra_ios
    if ios is not None and ios.force_polling:
        return ["polling"]
    if ios is not None and ios.force_websockets:
        return ["websocket"]
    transports = list(options.transports or ())
    if "websocket" not in transports:
        transports.append("websocket")
    return transports


def resolve_headers(options: ConnectionOptions) -> dict[str, str]:
    headers: dict[str, str] = {}
    if options.extra_android is not None:
        for name, values in options.extra_android.extra_headers.items():
            headers[name] = ", ".join(values)
    if options.extra_ios is not None and options.extra_ios.extra_headers:
        headers.update(options.extra_ios.extra_headers)
    return headers


def resolve_url(url: str, options: Optional[ConnectionOptions]) -> str:
    """Apply the secure flag and query string to the target url."""
    if options is None:
        return url
    parts = urlsplit(url)
    scheme = parts.scheme
    if options.secure:
        scheme = _SECURE_SCHEMES.get(scheme, scheme)
    query = parts.query
    if options.query:
        extra = options.query if isinstance(options.query, str) else urlencode(dict(options.query))
        extra = extra.lstrip("?")
        query = f"{query}&{extra}" if query else extra
    return urlunsplit((scheme, parts.netloc, parts.path, query, parts.fragment))


def connect_kwargs(options: Optional[ConnectionOptions]) -> dict[str, Any]:
    """AsyncClient.connect() keyword arguments for the supplied options."""
    if options is None:
        return {}
    kwargs: dict[str, Any] = {"transports": resolve_transports(options)}
    headers = resolve_headers(options)
    if headers:
        kwargs["headers"] = headers
    if options.auth is not None:
        kwargs["auth"] = dict(options.auth)
    if options.path is not None:
        kwargs["socketio_path"] = options.path
    if options.timeout is not None:
        kwargs["wait_timeout"] = options.timeout / C.SECOND_MS
    return kwargs


def connect_deadline(options: Optional[ConnectionOptions]) -> Optional[float]:
    """Overall connect deadline in seconds, or None for no deadline."""
    if options is None or options.timeout is None:
        return None
    return options.timeout / C.SECOND_MS


# =============================================================================
# TRANSPORT
# =============================================================================
class SocketIOTransport:
    """
    SocketTransport backed by socketio.AsyncClient.

    A fresh client is built for every connect; the previous one, if any,
    is disconnected first.

    Example:
        transport = SocketIOTransport()
        manager = SessionManager(transport)
        await manager.connect("http://localhost:3001", on_session_id=print)
    """

    def __init__(
        self,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        """
        Args:
            client_factory: builds the Socket.IO client; defaults to
                socketio.AsyncClient
        """
        self._client_factory = client_factory or socketio.AsyncClient
        self._client: Optional[Any] = None
        self._connecting = False
        self._feed: asyncio.Queue[InboundMessage] = asyncio.Queue()

    @property
    def client(self) -> Optional[Any]:
        return self._client

    def _is_connected(self) -> bool:
        return self._client is not None and bool(self._client.connected)

    def _push(self, message: InboundMessage) -> None:
        self._feed.put_nowait(message)

    def _session_id(self, client: Any) -> str:
        return client.get_sid() or client.sid or ""

    def _install_status_handlers(self, client: Any) -> None:
        async def on_connect() -> None:
            self._push(status_message("connected", socketId=self._session_id(client)))

        async def on_connect_error(*args: Any) -> None:
            reason = str(args[0]) if args else "Connection failed"
            if self._connecting:
                # connect() raises for this attempt
                logger.debug("Connection error during connect: %s", reason)
                return
            logger.error("Connection error: %s", reason)
            self._push(status_message("error", reason=reason))

        async def on_disconnect(*args: Any) -> None:
            if self._connecting:
                return
            self._push(status_message("disconnected"))

        client.on("connect", on_connect)
        client.on("connect_error", on_connect_error)
        client.on("disconnect", on_disconnect)

    async def connect(
        self,
        url: str,
        options: Optional[ConnectionOptions] = None,
    ) -> str:
        validate_url(url)

        if self._client is not None:
            previous, self._client = self._client, None
            try:
                await previous.disconnect()
            except Exception as e:
                logger.warning("Failed to close previous client: %s", e)

        client = None
        self._connecting = True
        try:
            client = self._client_factory(**client_kwargs(options))
            self._install_status_handlers(client)
            await asyncio.wait_for(
                client.connect(resolve_url(url, options), **connect_kwargs(options)),
                connect_deadline(options),
            )
            self._client = client
        except SocketError:
            raise
        except asyncio.TimeoutError as e:
            await self._abandon(client)
            raise error_from_code(
                ErrorKind.CONNECTION_TIMEOUT.value,
                f"Connection timed out after {options.timeout}ms",
                "connect",
                cause=e,
            ) from e
        except Exception as e:
            raise error_from_code(
                ErrorKind.CONNECTION_FAILED.value,
                f"Connection failed: {e}",
                "connect",
                cause=e,
            ) from e
        finally:
            self._connecting = False

        return self._session_id(client)

    async def listen(self, event: str) -> None:
        if not event:
            raise error_from_code(ErrorKind.EVENT_ERROR.value, "Event name cannot be empty", "listen")
        if not self._is_connected():
            raise error_from_code(ErrorKind.NOT_CONNECTED.value, "Socket is not connected", "listen")

        async def forward(*args: Any) -> None:
            self._push(event_message(event, args[0] if args else None))

        try:
            self._client.on(event, forward)
        except Exception as e:
            raise error_from_code(
                ErrorKind.EVENT_ERROR.value,
                f"Failed to listen to event '{event}': {e}",
                "listen",
                cause=e,
            ) from e

    async def unlisten(self, event: str) -> None:
        if not event:
            raise error_from_code(ErrorKind.EVENT_ERROR.value, "Event name cannot be empty", "unlisten")
        if self._client is None:
            return
        try:
            self._client.handlers.get("/", {}).pop(event, None)
        except Exception as e:
            raise error_from_code(
                ErrorKind.EVENT_ERROR.value,
                f"Failed to unlisten from event '{event}': {e}",
                "unlisten",
                cause=e,
            ) from e

    async def emit(self, event: str, data: EventData) -> None:
        if not event:
            raise error_from_code(ErrorKind.EMISSION_FAILED.value, "Event name cannot be empty", "emit")
        if not self._is_connected():
            raise error_from_code(ErrorKind.NOT_CONNECTED.value, "Socket is not connected", "emit")

        # Tuples would be sent as separate arguments
        payload = list(data) if isinstance(data, tuple) else data
        try:
            await self._client.emit(event, payload)
        except socketio_errors.BadNamespaceError as e:
            raise error_from_code(ErrorKind.NOT_CONNECTED.value, str(e), "emit", cause=e) from e
        except Exception as e:
            raise error_from_code(
                ErrorKind.EMISSION_FAILED.value,
                f"Failed to emit event '{event}': {e}",
                "emit",
                cause=e,
            ) from e

    async def _abandon(self, client: Optional[Any]) -> None:
        if client is None:
            return
        try:
            await client.disconnect()
        except Exception as e:
            logger.warning("Failed to close timed out client: %s", e)

    async def disconnect(self) -> None:
        client = self._client
        if client is None:
            return
        try:
            await client.disconnect()
        except Exception as e:
            raise error_from_code(
                ErrorKind.DISCONNECTION_FAILED.value,
                f"Failed to disconnect: {e}",
                "disconnect",
                cause=e,
            ) from e
        self._client = None

    async def inbound(self) -> AsyncIterator[InboundMessage]:
        while True:
            message = await self._feed.get()
            try:
                yield message
            finally:
                self._feed.task_done()
