"""
Session Holder: One Live SessionManager per Composition Root

The application creates one holder and passes it where a manager is
needed. get() builds the manager lazily; destroy() disposes it so the
next get() starts from a clean state.

Usage:
    holder = SessionHolder.with_transport(SocketIOTransport)
    manager = holder.get()
    ...
    holder.destroy()
"""

from __future__ import annotations

from typing import Callable, Optional

from socket_session.core.config import ClientConfig
from socket_session.observability.logging import StructuredLogger
from socket_session.session.manager import SessionManager
from socket_session.transport.protocols import SocketTransport

logger = StructuredLogger(__name__)


class SessionHolder:
    """Owns the lifetime of at most one live SessionManager."""

    __slots__ = ("_factory", "_instance")

    def __init__(self, factory: Callable[[], SessionManager]) -> None:
        self._factory = factory
        self._instance: Optional[SessionManager] = None

    @classmethod
    def with_transport(
        cls,
        transport_factory: Callable[[], SocketTransport],
        config: Optional[ClientConfig] = None,
    ) -> SessionHolder:
        """Holder whose managers each get a fresh transport."""
        return cls(lambda: SessionManager(transport_factory(), config))

    @property
    def instance(self) -> Optional[SessionManager]:
        """Current manager, without creating one."""
        return self._instance

    def get(self) -> SessionManager:
        if self._instance is None or self._instance.disposed:
            self._instance = self._factory()
            logger.debug("Created session manager")
        return self._instance

    def destroy(self) -> None:
        """Dispose the current manager, if any. Safe to call repeatedly."""
        instance, self._instance = self._instance, None
        if instance is not None:
            instance.dispose()
            logger.debug("Destroyed session manager")
