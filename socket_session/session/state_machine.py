"""
Session State: Connection Status, Status Events and Status Parsing

States:
    CONNECTING   → Connect issued, no session yet
    CONNECTED    → Session established, identifier known
    DISCONNECTED → No session (initial state)
    ERROR        → Last attempt or live session failed

Only CONNECTED counts as "has a session"; every other state is
not-connected for the purposes of on/emit/connect dedup.

Status payloads arrive from the transport's inbound feed:
    {"status": "connecting"}
    {"status": "connected", "socketId": "s1"}
    {"status": "disconnected"}
    {"status": "error", "reason": "boom"}

parse_status() never raises: anything unrecognized becomes ERROR.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from socket_session.core import constants as C
from socket_session.core.options import ConnectionOptions
from socket_session.core.types import Timestamp


# =============================================================================
# CONNECTION STATUS
# =============================================================================
class ConnectionStatus(Enum):
    """Connection lifecycle states, valued by their wire names."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"

    @property
    def is_connected(self) -> bool:
        return self is ConnectionStatus.CONNECTED


# =============================================================================
# STATUS EVENT (TAGGED VARIANT)
# =============================================================================
@dataclass(frozen=True, slots=True)
class StatusEvent:
    """
    One transition published on the status stream.

    session_id is set only for CONNECTED, reason only for ERROR.
    """

    status: ConnectionStatus
    session_id: Optional[str] = None
    reason: Optional[str] = None
    timestamp: Timestamp = field(default_factory=Timestamp.now, compare=False)

    @classmethod
    def connecting(cls) -> StatusEvent:
        return cls(ConnectionStatus.CONNECTING)

    @classmethod
    def connected(cls, session_id: str) -> StatusEvent:
        return cls(ConnectionStatus.CONNECTED, session_id=session_id)

    @classmethod
    def disconnected(cls) -> StatusEvent:
        return cls(ConnectionStatus.DISCONNECTED)

    @classmethod
    def error(cls, reason: str) -> StatusEvent:
        return cls(ConnectionStatus.ERROR, reason=reason)


def parse_status(payload: Any) -> StatusEvent:
    """
    Decode a status payload from the inbound feed.

    Unknown statuses and malformed payloads decode to an ERROR event
    with the generic reason.
    """
    try:
        status = payload["status"]
        if status == "connecting":
            return StatusEvent.connecting()
        if status == "connected":
            session_id = payload.get("socketId")
            return StatusEvent.connected("" if session_id is None else str(session_id))
        if status == "disconnected":
            return StatusEvent.disconnected()
        if status == "error":
            reason = payload.get("reason")
            return StatusEvent.error(C.UNKNOWN_ERROR_REASON if reason is None else str(reason))
    except (KeyError, TypeError, AttributeError):
        pass
    return StatusEvent.error(C.UNKNOWN_ERROR_REASON)


# =============================================================================
# SESSION STATE
# =============================================================================
@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Immutable copy of the session state for callers."""

    status: ConnectionStatus
    session_id: str
    last_url: Optional[str]
    last_options: Optional[ConnectionOptions]
    listening: bool

    @property
    def connected(self) -> bool:
        return self.status.is_connected


@dataclass
class SessionState:
    """
    Mutable session state, owned by one SessionManager.

    Only modified by the manager's operations and status handling.
    """

    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    session_id: str = ""
    last_url: Optional[str] = None
    last_options: Optional[ConnectionOptions] = None
    listening: bool = False

    @property
    def connected(self) -> bool:
        return self.status.is_connected

    def mark(self, status: ConnectionStatus) -> None:
        """Move to `status`; leaving CONNECTED forgets the session id."""
        self.status = status
        if not status.is_connected:
            self.session_id = ""

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self.status,
            session_id=self.session_id,
            last_url=self.last_url,
            last_options=self.last_options,
            listening=self.listening,
        )
