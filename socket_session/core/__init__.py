"""
Core module: Type definitions, error taxonomy, options and configuration.

This module provides the foundational abstractions for the client:
- Result monad for non-raising aggregate outcomes
- Closed error taxonomy with transport code mapping
- Immutable connection options with reduced-equality dedup
- Configuration management with validation
"""

from socket_session.core.types import (
    Result,
    Ok,
    Err,
    Timestamp,
    EventData,
    EventCallback,
    is_event_data,
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
    error_from_code,
)
from socket_session.core.options import (
    ConnectionOptions,
    ExtraIOSOptions,
    ExtraAndroidOptions,
    ConnectDecision,
    decide_connect,
    options_equivalent,
)
from socket_session.core.config import ClientConfig

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Timestamp",
    "EventData",
    "EventCallback",
    "is_event_data",
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
    "error_from_code",
    "ConnectionOptions",
    "ExtraIOSOptions",
    "ExtraAndroidOptions",
    "ConnectDecision",
    "decide_connect",
    "options_equivalent",
    "ClientConfig",
]
