"""
Closed Error Taxonomy for the Socket Session Client

Every failure a caller can observe is one of eight kinds:

    CONNECTION_FAILED     connect could not establish a session
    CONNECTION_TIMEOUT    connect did not complete in time
    INVALID_URL           target url rejected before any network activity
    NOT_CONNECTED         operation requires a live session
    EVENT_ERROR           listen / unlisten failed
    EMISSION_FAILED       emit failed
    DISCONNECTION_FAILED  disconnect failed
    GENERIC               anything that fits none of the above

Each error type includes:
- The kind, fixed per class
- Human-readable message
- Optional machine code as reported by the transport
- Optional cause for root cause analysis
- Timestamp for correlation with log lines

Usage:
    try:
        await manager.connect(url, on_session_id=print)
    except SocketTimeoutError as e:
        retry_later(e.message)
    except SocketError as e:
        report(e.to_dict())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional
from uuid import uuid4

from socket_session.core.types import Timestamp


# =============================================================================
# ERROR KIND ENUMERATION
# =============================================================================
class ErrorKind(Enum):
    """
    Error kinds, valued by the failure code a transport reports for them.
    """

    CONNECTION_FAILED = "CONNECTION_FAILED"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    INVALID_URL = "INVALID_URL"
    NOT_CONNECTED = "NOT_CONNECTED"
    EVENT_ERROR = "EVENT_ERROR"
    EMISSION_FAILED = "EMISSION_FAILED"
    DISCONNECTION_FAILED = "DISCONNECTION_FAILED"
    GENERIC = "GENERIC"


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass(eq=False)
class SocketError(Exception):
    """
    Base class for all socket session errors.

    Provides common infrastructure for error handling:
    - Unique error ID for log correlation
    - Optional transport code for programmatic handling
    - Cause chain for root cause analysis
    """

    kind: ClassVar[ErrorKind] = ErrorKind.GENERIC

    message: str
    code: Optional[str] = None
    cause: Optional[BaseException] = None
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: Timestamp = field(default_factory=Timestamp.now)
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "timestamp_nanos": self.timestamp.nanos,
            "context": self.context,
        }

    def __str__(self) -> str:
        suffix = f" (Code: {self.code})" if self.code is not None else ""
        return f"{self.__class__.__name__}: {self.message}{suffix}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# CONNECTION ERRORS
# =============================================================================
@dataclass(eq=False)
class SocketConnectionError(SocketError):
    """Connection to the server failed."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONNECTION_FAILED

    @classmethod
    def wrap(cls, cause: BaseException) -> SocketConnectionError:
        """Wrap an unexpected failure raised while connecting."""
        return cls(message=f"Connection failed: {cause}", cause=cause)

    @classmethod
    def no_previous_connection(cls) -> SocketConnectionError:
        return cls(message="Cannot reconnect: No previous connection information")

    @classmethod
    def no_session_callback(cls) -> SocketConnectionError:
        return cls(message="Cannot reconnect: No socket ID callback available")


@dataclass(eq=False)
class SocketTimeoutError(SocketError):
    """Connection attempt timed out."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONNECTION_TIMEOUT


@dataclass(eq=False)
class SocketInvalidUrlError(SocketError):
    """Target URL is empty or malformed."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_URL

    @classmethod
    def empty(cls) -> SocketInvalidUrlError:
        return cls(message="URL cannot be empty", code=ErrorKind.INVALID_URL.value)

    @classmethod
    def malformed(cls, url: str) -> SocketInvalidUrlError:
        return cls(
            message=f"Invalid URL format: {url}",
            code=ErrorKind.INVALID_URL.value,
            context={"url": url},
        )


@dataclass(eq=False)
class SocketNotConnectedError(SocketError):
    """Operation needs a live session and there is none."""

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_CONNECTED

    @classmethod
    def default(cls) -> SocketNotConnectedError:
        return cls(message="Socket is not connected", code=ErrorKind.NOT_CONNECTED.value)


# =============================================================================
# EVENT ERRORS
# =============================================================================
@dataclass(eq=False)
class SocketEventError(SocketError):
    """Registering or removing an event listener failed."""

    kind: ClassVar[ErrorKind] = ErrorKind.EVENT_ERROR

    @classmethod
    def listen_failed(cls, event: str, cause: BaseException) -> SocketEventError:
        return cls(
            message=f'Failed to listen to event "{event}": {cause}',
            cause=cause,
            context={"event": event},
        )

    @classmethod
    def unlisten_failed(cls, event: str, cause: BaseException) -> SocketEventError:
        return cls(
            message=f'Failed to stop listening to event "{event}": {cause}',
            cause=cause,
            context={"event": event},
        )

    @classmethod
    def empty_name(cls) -> SocketEventError:
        return cls(message="Event name cannot be empty", code=ErrorKind.EVENT_ERROR.value)


@dataclass(eq=False)
class SocketEmissionError(SocketError):
    """Sending an event failed."""

    kind: ClassVar[ErrorKind] = ErrorKind.EMISSION_FAILED

    @classmethod
    def emit_failed(cls, event: str, cause: BaseException) -> SocketEmissionError:
        return cls(
            message=f'Failed to emit event "{event}": {cause}',
            cause=cause,
            context={"event": event},
        )

    @classmethod
    def unsupported_payload(cls, event: str, data: Any) -> SocketEmissionError:
        return cls(
            message=(
                f'Cannot emit event "{event}": payload of type '
                f"{type(data).__name__} is not serializable"
            ),
            context={"event": event},
        )

    @classmethod
    def empty_name(cls) -> SocketEmissionError:
        return cls(message="Event name cannot be empty", code=ErrorKind.EMISSION_FAILED.value)


@dataclass(eq=False)
class SocketDisconnectionError(SocketError):
    """Tearing down the session failed."""

    kind: ClassVar[ErrorKind] = ErrorKind.DISCONNECTION_FAILED

    @classmethod
    def wrap(cls, cause: BaseException) -> SocketDisconnectionError:
        return cls(message=f"Failed to disconnect: {cause}", cause=cause)


@dataclass(eq=False)
class GenericSocketError(SocketError):
    """Unclassified failure."""

    kind: ClassVar[ErrorKind] = ErrorKind.GENERIC


# =============================================================================
# TRANSPORT CODE MAPPING
# =============================================================================
ERROR_TYPES: dict[ErrorKind, type[SocketError]] = {
    ErrorKind.CONNECTION_FAILED: SocketConnectionError,
    ErrorKind.CONNECTION_TIMEOUT: SocketTimeoutError,
    ErrorKind.INVALID_URL: SocketInvalidUrlError,
    ErrorKind.NOT_CONNECTED: SocketNotConnectedError,
    ErrorKind.EVENT_ERROR: SocketEventError,
    ErrorKind.EMISSION_FAILED: SocketEmissionError,
    ErrorKind.DISCONNECTION_FAILED: SocketDisconnectionError,
    ErrorKind.GENERIC: GenericSocketError,
}

# Fallback kind for codes the taxonomy does not know, keyed by operation
OPERATION_FALLBACKS: dict[str, ErrorKind] = {
    "connect": ErrorKind.CONNECTION_FAILED,
    "listen": ErrorKind.EVENT_ERROR,
    "unlisten": ErrorKind.EVENT_ERROR,
    "emit": ErrorKind.EMISSION_FAILED,
    "disconnect": ErrorKind.DISCONNECTION_FAILED,
}


def kind_for_code(code: Optional[str], operation: str) -> ErrorKind:
    """
    Resolve a transport failure code to an error kind.

    Known codes map to their own kind. Unknown codes (including GENERIC,
    which a transport never reports for a classified failure) fall back
    on the operation that failed.
    """
    if code is not None and code != ErrorKind.GENERIC.value:
        try:
            return ErrorKind(code)
        except ValueError:
            pass
    return OPERATION_FALLBACKS.get(operation, ErrorKind.GENERIC)


def error_from_code(
    code: Optional[str],
    message: Optional[str],
    operation: str,
    cause: Optional[BaseException] = None,
) -> SocketError:
    """
    Build the typed error for a transport-reported failure.

    The original code string is kept on the error even when the kind
    was chosen by operation fallback.
    """
    kind = kind_for_code(code, operation)
    return ERROR_TYPES[kind](
        message=message or "Unknown error",
        code=code,
        cause=cause,
        context={"operation": operation},
    )
