"""
Session Module: Client Connection Lifecycle

Provides:
- SessionManager: connect dedup, listener bookkeeping, event routing
- SessionHolder: explicit owner of the one live manager
- StatusStream: broadcast of connection status transitions
- ListenerRegistry: pending vs active event callbacks
- ConnectionStatus / StatusEvent: status model and inbound parsing

Architecture:
- Caller operations and the inbound pump share one event loop
- Pending listeners are promoted on every new session
"""

from socket_session.session.state_machine import (
    ConnectionStatus,
    StatusEvent,
    SessionState,
    SessionSnapshot,
    parse_status,
)
from socket_session.session.registry import (
    ListenerRegistry,
    ActiveListener,
)
from socket_session.session.stream import (
    StatusStream,
    StatusStreamView,
    StatusSubscription,
)
from socket_session.session.manager import SessionManager
from socket_session.session.holder import SessionHolder

__all__ = [
    # State
    "ConnectionStatus",
    "StatusEvent",
    "SessionState",
    "SessionSnapshot",
    "parse_status",
    # Registry
    "ListenerRegistry",
    "ActiveListener",
    # Stream
    "StatusStream",
    "StatusStreamView",
    "StatusSubscription",
    # Manager
    "SessionManager",
    "SessionHolder",
]
