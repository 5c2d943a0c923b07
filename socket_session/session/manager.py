"""
Session Manager: Connection Lifecycle over a SocketTransport

Owns:
    - SessionState (status, session id, last url/options, listening flag)
    - ListenerRegistry (pending vs active event callbacks)
    - StatusStream (broadcast of status transitions)
    - Lifecycle callbacks (single slot each)

Connect dedup:
    SAME      → already connected with the same url and reduced options:
                no transport call, current id handed back
    RECONNECT → connected elsewhere: disconnect, short grace pause, connect
    FRESH     → not connected: connect

Pending listeners:
    on() before a session exists is queued; every successful connection
    promotes the queue (and re-registers listeners left over from an
    earlier session) with independent best-effort attempts.

Concurrency:
    One asyncio loop. The inbound pump task and caller operations
    interleave at await points; promotion is serialized by a lock and
    late transport results are ignored after dispose().
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional

from socket_session.core.config import ClientConfig
from socket_session.core.errors import (
    SocketConnectionError,
    SocketDisconnectionError,
    SocketEmissionError,
    SocketError,
    SocketEventError,
    SocketNotConnectedError,
)
from socket_session.core.options import ConnectDecision, ConnectionOptions, decide_connect
from socket_session.core import constants as C
from socket_session.core.types import (
    Err,
    EventCallback,
    EventData,
    Ok,
    Result,
    is_event_data,
)
from socket_session.observability.logging import StructuredLogger
from socket_session.session.registry import ListenerRegistry
from socket_session.session.state_machine import (
    ConnectionStatus,
    SessionSnapshot,
    SessionState,
    StatusEvent,
    parse_status,
)
from socket_session.session.stream import StatusStream, StatusStreamView
from socket_session.transport.protocols import InboundMessage, SocketTransport

logger = StructuredLogger(__name__)

SessionIdCallback = Callable[[str], Any]
LifecycleCallback = Callable[[], Any]
ErrorCallback = Callable[[str], Any]


class SessionManager:
    """
    Client-side session manager.

    Usage:
        manager = SessionManager(SocketIOTransport())
        manager.on_error(lambda reason: print("error:", reason))
        await manager.on("chat", handle_chat)       # queued until connected
        session_id = await manager.connect(
            "http://localhost:3001",
            on_session_id=lambda sid: print("session", sid),
        )
        await manager.emit("chat", {"text": "hello"})
        await manager.disconnect()
        manager.dispose()
    """

    def __init__(
        self,
        transport: SocketTransport,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._transport = transport
        self._config = config or ClientConfig()
        self._state = SessionState()
        self._registry = ListenerRegistry()
        self._stream = StatusStream()
        self._promotion_lock = asyncio.Lock()
        self._pump_task: Optional[asyncio.Task[None]] = None
        self._callback_tasks: set[asyncio.Task[Any]] = set()
        self._disposed = False

        self._on_session_id: Optional[SessionIdCallback] = None
        self._on_connected: Optional[LifecycleCallback] = None
        self._on_connecting: Optional[LifecycleCallback] = None
        self._on_disconnected: Optional[LifecycleCallback] = None
        self._on_error: Optional[ErrorCallback] = None

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------
    @property
    def status_stream(self) -> StatusStreamView:
        return StatusStreamView(self._stream)

    @property
    def is_connected(self) -> bool:
        return self._state.connected

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def session_id(self) -> str:
        return self._state.session_id

    @property
    def transport(self) -> SocketTransport:
        return self._transport

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def active_events(self) -> frozenset[str]:
        return self._registry.active_events

    @property
    def pending_events(self) -> frozenset[str]:
        return self._registry.pending_events

    def snapshot(self) -> SessionSnapshot:
        return self._state.snapshot()

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------
    async def connect(
        self,
        url: str,
        on_session_id: SessionIdCallback,
        options: Optional[ConnectionOptions] = None,
    ) -> str:
        """
        Connect to `url`, or reuse the live session when nothing changed.

        Args:
            url: Server url (validated by the transport)
            on_session_id: Called with the session id once it is known
            options: Connection options; the configured defaults when None

        Returns:
            The session identifier

        Raises:
            SocketError: Transport errors unchanged; anything else as
                SocketConnectionError. Every failure is also published as
                an ERROR status and passed to the error callback.
        """
        if options is None:
            options = self._config.default_options

        try:
            decision = decide_connect(
                self._state.connected,
                self._state.last_url,
                self._state.last_options,
                url,
                options,
            )

            if decision is ConnectDecision.SAME:
                logger.debug("Already connected with the same intent", session_url=url)
                self._on_session_id = on_session_id
                self._invoke(on_session_id, self._state.session_id)
                return self._state.session_id

            if decision is ConnectDecision.RECONNECT:
                logger.info(
                    "Connection intent changed, reconnecting",
                    previous_url=self._state.last_url,
                    session_url=url,
                )
                await self.disconnect()
                await asyncio.sleep(self._config.reconnect_grace_s)

            self._start_listening()

            self._on_session_id = on_session_id
            self._state.last_url = url
            self._state.last_options = options
            self._state.mark(ConnectionStatus.CONNECTING)
            self._stream.publish(StatusEvent.connecting())

            with logger.context(session_url=url):
                session_id = await self._transport.connect(url, options)
                if self._disposed:
                    return session_id

                self._state.status = ConnectionStatus.CONNECTED
                self._state.session_id = session_id
                logger.info("Connected", session_id=session_id)

                await self._promote_pending()
            return session_id

        except Exception as e:
            error = e if isinstance(e, SocketError) else SocketConnectionError.wrap(e)
            if not self._disposed:
                self._state.mark(ConnectionStatus.ERROR)
                self._stream.publish(StatusEvent.error(error.message))
                if self._on_error is not None:
                    self._invoke(self._on_error, error.message)
            logger.error("Connect failed", session_url=url, error=str(error))
            if error is e:
                raise
            raise error from e

    async def disconnect(self) -> None:
        """
        Close the session. Registries are kept so the next connect can
        register them again.

        Raises:
            SocketError: Transport errors unchanged; anything else as
                SocketDisconnectionError. State is untouched on failure.
        """
        try:
            await self._transport.disconnect()
        except SocketError:
            raise
        except Exception as e:
            raise SocketDisconnectionError.wrap(e) from e

        if self._disposed:
            return
        self._state.mark(ConnectionStatus.DISCONNECTED)
        self._stream.publish(StatusEvent.disconnected())
        logger.info("Disconnected")

    async def reconnect(self) -> str:
        """
        Connect again with the last url, options and session-id callback.

        Raises:
            SocketConnectionError: no previous connect, or no callback on
                record; otherwise as connect()
        """
        if self._state.last_url is None:
            raise SocketConnectionError.no_previous_connection()
        if self._on_session_id is None:
            raise SocketConnectionError.no_session_callback()
        return await self.connect(
            self._state.last_url,
            self._on_session_id,
            self._state.last_options,
        )

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------
    async def on(self, event: str, callback: EventCallback) -> None:
        """
        Route server event `event` to `callback`, replacing any previous
        callback for that name.

        Never fails for timing reasons: without a session (or when the
        session vanishes mid-call) the listener is queued until the next
        successful connection.
        """
        if self._disposed:
            logger.warning("Ignoring listener on disposed manager", event_name=event)
            return

        if not self._state.connected:
            self._registry.add_pending(event, callback)
            logger.debug("Stored pending listener (not connected)", event_name=event)
            return

        session_id = self._state.session_id
        if self._registry.is_live(event, session_id):
            self._registry.replace_callback(event, callback)
            return

        try:
            await self._transport.listen(event)
        except SocketNotConnectedError:
            self._registry.add_pending(event, callback)
            logger.debug("Stored pending listener (transport not connected)", event_name=event)
            return
        except SocketError:
            raise
        except Exception as e:
            raise SocketEventError.listen_failed(event, e) from e

        if not self._disposed:
            self._registry.add_active(event, callback, session_id)

    async def off(self, event: str) -> None:
        """
        Stop routing `event`. No-op for names that were never registered.

        Raises:
            SocketError: Transport errors unchanged; anything else as
                SocketEventError. The active entry survives a failure.
        """
        self._registry.discard_pending(event)
        if not self._registry.is_active(event):
            return

        try:
            await self._transport.unlisten(event)
        except SocketError:
            raise
        except Exception as e:
            raise SocketEventError.unlisten_failed(event, e) from e

        self._registry.discard_active(event)

    async def emit(self, event: str, data: EventData = None) -> None:
        """
        Send `event` to the server.

        Dropped silently without a session or if the session vanishes
        mid-call.

        Raises:
            SocketEmissionError: payload is not plain serializable data, or
                the transport failed unexpectedly
            SocketError: other transport errors unchanged
        """
        if not self._state.connected:
            logger.debug("Ignoring emit (not connected)", event_name=event)
            return
        if not is_event_data(data):
            raise SocketEmissionError.unsupported_payload(event, data)

        try:
            await self._transport.emit(event, data)
        except SocketNotConnectedError:
            logger.debug("Ignoring emit (transport not connected)", event_name=event)
        except SocketError:
            raise
        except Exception as e:
            raise SocketEmissionError.emit_failed(event, e) from e

    # -------------------------------------------------------------------------
    # Lifecycle callbacks (single slot, last registration wins)
    # -------------------------------------------------------------------------
    def on_connected(self, callback: LifecycleCallback) -> None:
        self._on_connected = callback

    def on_connecting(self, callback: LifecycleCallback) -> None:
        self._on_connecting = callback

    def on_disconnected(self, callback: LifecycleCallback) -> None:
        self._on_disconnected = callback

    def on_error(self, callback: ErrorCallback) -> None:
        self._on_error = callback

    # -------------------------------------------------------------------------
    # Disposal
    # -------------------------------------------------------------------------
    def dispose(self) -> None:
        """
        Release everything: close the status stream, drop all listeners,
        stop consuming the inbound feed. Safe to call more than once.
        """
        try:
            self._disposed = True
            self._stream.close()
            self._registry.clear()
            if self._pump_task is not None:
                self._pump_task.cancel()
                self._pump_task = None
            self._state.listening = False
            self._state.mark(ConnectionStatus.DISCONNECTED)
        except Exception:
            logger.exception("Error during dispose")

    # -------------------------------------------------------------------------
    # Pending listener promotion
    # -------------------------------------------------------------------------
    async def _register(self, event: str) -> Result[None, SocketError]:
        try:
            await self._transport.listen(event)
        except SocketError as e:
            return Err(e)
        except Exception as e:
            return Err(SocketEventError.listen_failed(event, e))
        return Ok(None)

    async def _promote_pending(self) -> dict[str, Result[None, SocketError]]:
        """
        Register pending listeners, and active ones from an earlier
        session, with the live session.

        Each registration is attempted independently. A failed pending
        entry is dropped (callers may call on() again); a failed stale
        entry stays stale until the next connection.

        Returns:
            Outcome per event name
        """
        async with self._promotion_lock:
            if self._disposed or not self._state.connected:
                return {}

            session_id = self._state.session_id
            stale = self._registry.stale_items(session_id)
            pending = self._registry.pending_items()
            if not stale and not pending:
                return {}

            logger.debug(
                "Registering listeners",
                pending_count=len(pending),
                stale_count=len(stale),
            )
            entries = stale + pending
            results = await asyncio.gather(
                *(self._register(event) for event, _ in entries)
            )

            outcomes: dict[str, Result[None, SocketError]] = {}
            if self._disposed:
                return outcomes

            for index, ((event, callback), outcome) in enumerate(zip(entries, results)):
                outcomes[event] = outcome
                is_pending = index >= len(stale)
                if outcome.is_ok():
                    if is_pending:
                        self._registry.promote(event, callback, session_id)
                    else:
                        self._registry.refresh(event, callback, session_id)
                    logger.debug("Registered listener", event_name=event)
                else:
                    if is_pending:
                        self._registry.drop_pending(event, callback)
                    logger.warning(
                        "Failed to register listener",
                        event_name=event,
                        error=str(outcome.error),
                    )
            return outcomes

    # -------------------------------------------------------------------------
    # Inbound feed
    # -------------------------------------------------------------------------
    def _start_listening(self) -> None:
        if self._state.listening:
            return
        self._state.listening = True
        self._pump_task = asyncio.get_running_loop().create_task(self._pump())

    async def _pump(self) -> None:
        try:
            async for message in self._transport.inbound():
                if self._disposed:
                    break
                await self._handle_inbound(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Inbound feed failed")
            if self._disposed:
                return
            reason = f"Inbound feed error: {e}"
            self._state.mark(ConnectionStatus.ERROR)
            self._stream.publish(StatusEvent.error(reason))
            if self._on_error is not None:
                self._invoke(self._on_error, reason)

    async def _handle_inbound(self, message: InboundMessage) -> None:
        try:
            kind = message.get("type")
            payload = message.get("payload")
            if kind == C.MESSAGE_STATUS:
                await self._apply_status(parse_status(payload))
            elif kind == C.MESSAGE_SOCKET_EVENT:
                self._dispatch_event(payload["event"], payload.get("data"))
            else:
                logger.warning("Received unknown message type", message_type=str(kind))
        except Exception:
            logger.exception("Error processing inbound message")

    async def _apply_status(self, event: StatusEvent) -> None:
        status = event.status
        if status is ConnectionStatus.CONNECTING:
            self._state.mark(status)
            self._invoke(self._on_connecting)
        elif status is ConnectionStatus.CONNECTED:
            self._state.status = status
            self._state.session_id = event.session_id or ""
            if self._state.session_id and self._on_session_id is not None:
                self._invoke(self._on_session_id, self._state.session_id)
            self._invoke(self._on_connected)
        elif status is ConnectionStatus.DISCONNECTED:
            self._state.mark(status)
            self._invoke(self._on_disconnected)
        else:
            self._state.mark(status)
            self._invoke(self._on_error, event.reason or C.UNKNOWN_ERROR_REASON)

        self._stream.publish(event)

        if status is ConnectionStatus.CONNECTED:
            await self._promote_pending()

    def _dispatch_event(self, event: str, data: EventData) -> None:
        callback = self._registry.callback_for(event)
        if callback is None:
            return
        self._invoke(callback, data)

    # -------------------------------------------------------------------------
    # Callback invocation
    # -------------------------------------------------------------------------
    def _invoke(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        """
        Call a user callback. Exceptions are logged, coroutine results are
        scheduled as tasks kept alive until done.
        """
        if callback is None:
            return
        try:
            result = callback(*args)
        except Exception:
            logger.exception("Error in callback", callback=getattr(callback, "__name__", repr(callback)))
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._callback_tasks.add(task)
            task.add_done_callback(self._callback_done)

    def _callback_done(self, task: asyncio.Task[Any]) -> None:
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Error in async callback", error=repr(error))
