"""
Socket Session: Client-Side Session Manager for Socket.IO Connections

Owns the connection lifecycle on top of a pluggable wire transport:
- Connect dedup: identical intent reuses the live session
- Pending listeners: on() before connecting is queued, then promoted
- Status stream: broadcast of connecting/connected/disconnected/error
- Error taxonomy: closed set of typed errors with transport code mapping

Transports:
- SocketIOTransport: python-socketio AsyncClient
- InMemoryTransport: loopback for tests and demos

License: MIT
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from socket_session.core.types import (
    Result,
    Ok,
    Err,
    EventData,
    EventCallback,
)
from socket_session.core.errors import (
    ErrorKind,
    SocketError,
    SocketConnectionError,
    SocketTimeoutError,
    SocketInvalidUrlError,
    SocketNotConnectedError,
    SocketEventError,
    SocketEmissionError,
    SocketDisconnectionError,
    GenericSocketError,
)
from socket_session.core.options import (
    ConnectionOptions,
    ExtraIOSOptions,
    ExtraAndroidOptions,
)
from socket_session.core.config import ClientConfig

from socket_session.session import (
    ConnectionStatus,
    StatusEvent,
    StatusSubscription,
    SessionManager,
    SessionHolder,
)
from socket_session.transport import (
    SocketTransport,
    InMemoryTransport,
    SocketIOTransport,
)

__all__ = [
    # Version
    "__version__",
    # Result monad
    "Result",
    "Ok",
    "Err",
    # Event payloads
    "EventData",
    "EventCallback",
    # Errors
    "ErrorKind",
    "SocketError",
    "SocketConnectionError",
    "SocketTimeoutError",
    "SocketInvalidUrlError",
    "SocketNotConnectedError",
    "SocketEventError",
    "SocketEmissionError",
    "SocketDisconnectionError",
    "GenericSocketError",
    # Options and config
    "ConnectionOptions",
    "ExtraIOSOptions",
    "ExtraAndroidOptions",
    "ClientConfig",
    # Session
    "ConnectionStatus",
    "StatusEvent",
    "StatusSubscription",
    "SessionManager",
    "SessionHolder",
    # Transports
    "SocketTransport",
    "InMemoryTransport",
    "SocketIOTransport",
]
