"""
Core Type Definitions for the Socket Session Client

Implements the Result/Either monad used wherever an operation must report
an aggregate outcome without raising, plus the opaque event payload type
that flows between callers and the transport.

Design Principles:
- Typed errors are raised at the public API boundary
- Result values are used for fan-out outcomes and configuration loading
- Event payloads are plain serializable values (no arbitrary objects)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    TypeVar,
    Union,
)

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result monad.

    Immutable container for successful computation results.
    """

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Extract value. Safe to call after is_ok() check."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result monad.

    Carries the error (usually a SocketError or a message string).
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, with error context
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return default value on error."""
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# TIMESTAMP
# =============================================================================
@dataclass(frozen=True, slots=True, order=True)
class Timestamp:
    """
    Nanosecond timestamp used to correlate errors and status transitions
    with log lines.
    """

    nanos: int

    @classmethod
    def now(cls) -> Timestamp:
        return cls(nanos=time.time_ns())

    @property
    def millis(self) -> int:
        """Convert to milliseconds (truncating)."""
        return self.nanos // 1_000_000

    def elapsed_millis(self) -> float:
        """Milliseconds elapsed since this timestamp."""
        return (time.time_ns() - self.nanos) / 1_000_000


# =============================================================================
# EVENT PAYLOADS
# =============================================================================
# Opaque, serializable value exchanged with the server. Passed through
# untouched in both directions.
EventData = Union[
    None,
    bool,
    int,
    float,
    str,
    list["EventData"],
    tuple["EventData", ...],
    dict[str, "EventData"],
]

EventCallback = Callable[[EventData], Any]


def is_event_data(value: Any) -> bool:
    """
    Check that a value belongs to the EventData union.

    Walks nested lists and maps; map keys must be strings.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return True
    if isinstance(value, (list, tuple)):
        return all(is_event_data(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and is_event_data(item)
            for key, item in value.items()
        )
    return False
