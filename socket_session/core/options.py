"""
Connection Options: Immutable Connection Intent

Describes how a session should be opened: server path, transport list,
reconnection policy, timeouts, auth/query data and per-platform extras.

Design:
- Immutable after construction (frozen dataclass, sequences as tuples)
- No field is required; unset fields are None and never reach the wire
- Structural equality (==) compares every field
- Dedup decisions use same_intent(), a reduced comparison over the
  fields that change what the transport negotiates
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Union


# =============================================================================
# PLATFORM EXTRAS
# =============================================================================
@dataclass(frozen=True)
class ExtraIOSOptions:
    """Options only understood by the iOS native client."""

    log: Optional[bool] = None
    compress: Optional[bool] = None
    force_polling: Optional[bool] = None
    force_websockets: Optional[bool] = None
    extra_headers: Optional[Mapping[str, str]] = None

    def __post_init__(self) -> None:
        if self.extra_headers is not None:
            object.__setattr__(
                self, "extra_headers", MappingProxyType(dict(self.extra_headers))
            )

    def to_wire_format(self) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        if self.log is not None:
            wire["log"] = self.log
        if self.compress is not None:
            wire["compress"] = self.compress
        if self.force_polling is not None:
            wire["forcePolling"] = self.force_polling
        if self.force_websockets is not None:
            wire["forceWebsockets"] = self.force_websockets
        if self.extra_headers is not None:
            wire["extraHeaders"] = dict(self.extra_headers)
        return wire

    @classmethod
    def from_wire_format(cls, wire: Mapping[str, Any]) -> ExtraIOSOptions:
        return cls(
            log=wire.get("log"),
            compress=wire.get("compress"),
            force_polling=wire.get("forcePolling"),
            force_websockets=wire.get("forceWebsockets"),
            extra_headers=wire.get("extraHeaders"),
        )


@dataclass(frozen=True)
class ExtraAndroidOptions:
    """Options only understood by the Android native client."""

    extra_headers: Mapping[str, Sequence[str]]

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "extra_headers",
            MappingProxyType({k: tuple(v) for k, v in self.extra_headers.items()}),
        )

    def to_wire_format(self) -> dict[str, Any]:
        return {
            "setExtraHeaders": {k: list(v) for k, v in self.extra_headers.items()},
        }

    @classmethod
    def from_wire_format(cls, wire: Mapping[str, Any]) -> ExtraAndroidOptions:
        return cls(extra_headers=wire.get("setExtraHeaders") or {})


# =============================================================================
# CONNECTION OPTIONS
# =============================================================================
# (python attribute, wire key) for the scalar fields, in wire order
_SCALAR_FIELDS: tuple[tuple[str, str], ...] = (
    ("path", "path"),
    ("reconnection", "reconnection"),
    ("reconnection_attempts", "reconnectionAttempts"),
    ("reconnection_delay", "reconnectionDelay"),
    ("reconnection_delay_max", "reconnectionDelayMax"),
    ("randomization_factor", "randomizationFactor"),
    ("timeout", "timeout"),
    ("secure", "secure"),
    ("force_new", "forceNew"),
)


@dataclass(frozen=True)
class ConnectionOptions:
    """
    Parameters of a connection request.

    Delays and timeout are milliseconds. reconnection_attempts of -1 means
    unlimited. query is either a raw query string or a mapping.

    Example:
        opts = ConnectionOptions(transports=["websocket"], timeout=5000)
        opts.to_wire_format()
        # {'transports': ['websocket'], 'timeout': 5000}
    """

    path: Optional[str] = None
    transports: Optional[Sequence[str]] = None
    reconnection: Optional[bool] = None
    reconnection_attempts: Optional[int] = None
    reconnection_delay: Optional[int] = None
    reconnection_delay_max: Optional[int] = None
    randomization_factor: Optional[float] = None
    timeout: Optional[int] = None
    query: Optional[Union[str, Mapping[str, str]]] = None
    auth: Optional[Mapping[str, str]] = None
    secure: Optional[bool] = None
    force_new: Optional[bool] = None
    extra_ios: Optional[ExtraIOSOptions] = None
    extra_android: Optional[ExtraAndroidOptions] = None

    def __post_init__(self) -> None:
        # Freeze caller-supplied containers so later mutation cannot leak in
        if self.transports is not None:
            object.__setattr__(self, "transports", tuple(self.transports))
        if self.auth is not None:
            object.__setattr__(self, "auth", MappingProxyType(dict(self.auth)))
        if self.query is not None and not isinstance(self.query, str):
            object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    # -------------------------------------------------------------------------
    # Dedup comparison
    # -------------------------------------------------------------------------
    def intent_key(self) -> tuple[Any, ...]:
        """
        The reduced field subset used for dedup decisions.

        Transports are joined so that None and an empty list compare equal.
        """
        return (
            ",".join(self.transports or ()),
            self.reconnection,
            self.reconnection_attempts,
            self.timeout,
            self.force_new,
        )

    def same_intent(self, other: ConnectionOptions) -> bool:
        return self.intent_key() == other.intent_key()

    # -------------------------------------------------------------------------
    # Wire format
    # -------------------------------------------------------------------------
    def to_wire_format(self) -> dict[str, Any]:
        """
        Encode as a plain mapping with camelCase keys.

        Only fields that were supplied appear in the result.
        """
        wire: dict[str, Any] = {}
        for attr, key in _SCALAR_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                wire[key] = value
        if self.transports is not None:
            wire["transports"] = list(self.transports)
        if self.query is not None:
            wire["query"] = self.query if isinstance(self.query, str) else dict(self.query)
        if self.auth is not None:
            wire["auth"] = dict(self.auth)
        if self.extra_ios is not None:
            wire["extraIOSConfig"] = self.extra_ios.to_wire_format()
        if self.extra_android is not None:
            wire["androidConfig"] = self.extra_android.to_wire_format()
        return wire

    @classmethod
    def from_wire_format(cls, wire: Mapping[str, Any]) -> ConnectionOptions:
        """Decode a mapping produced by to_wire_format()."""
        kwargs: dict[str, Any] = {
            attr: wire[key] for attr, key in _SCALAR_FIELDS if key in wire
        }
        for key in ("transports", "query", "auth"):
            if key in wire:
                kwargs[key] = wire[key]
        if "extraIOSConfig" in wire:
            kwargs["extra_ios"] = ExtraIOSOptions.from_wire_format(wire["extraIOSConfig"])
        if "androidConfig" in wire:
            kwargs["extra_android"] = ExtraAndroidOptions.from_wire_format(
                wire["androidConfig"]
            )
        return cls(**kwargs)


def options_equivalent(
    first: Optional[ConnectionOptions],
    second: Optional[ConnectionOptions],
) -> bool:
    """
    Reduced equality between two optional option sets.

    Two absent option sets are equivalent; absent and present are not.
    """
    if first is None and second is None:
        return True
    if first is None or second is None:
        return False
    return first.same_intent(second)


# =============================================================================
# CONNECT DECISION
# =============================================================================
class ConnectDecision(Enum):
    """What a connect call has to do given the current session."""

    SAME = auto()       # Reuse the live session
    RECONNECT = auto()  # Tear down the live session, then connect
    FRESH = auto()      # No live session, connect directly


def decide_connect(
    connected: bool,
    last_url: Optional[str],
    last_options: Optional[ConnectionOptions],
    url: str,
    options: Optional[ConnectionOptions],
) -> ConnectDecision:
    if not connected:
        return ConnectDecision.FRESH
    if url == last_url and options_equivalent(last_options, options):
        return ConnectDecision.SAME
    return ConnectDecision.RECONNECT
