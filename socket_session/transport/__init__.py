"""
Transport module: the wire-client boundary.

Provides:
- SocketTransport: structural protocol the session manager drives
- InMemoryTransport: loopback implementation for tests and demos
- SocketIOTransport: python-socketio AsyncClient adapter
"""

from socket_session.transport.protocols import (
    InboundMessage,
    SocketTransport,
    event_message,
    status_message,
    validate_url,
)
from socket_session.transport.memory import InMemoryTransport
from socket_session.transport.socketio_client import SocketIOTransport

__all__ = [
    "InboundMessage",
    "SocketTransport",
    "event_message",
    "status_message",
    "validate_url",
    "InMemoryTransport",
    "SocketIOTransport",
]
