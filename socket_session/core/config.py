"""
Configuration Management for the Socket Session Client

Provides validated configuration with sensible defaults and environment
variable overrides.

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from socket_session.core import constants as C
from socket_session.core.options import ConnectionOptions
from socket_session.core.types import Err, Ok, Result

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


@dataclass(frozen=True)
class ClientConfig:
    """Root configuration for a session manager."""

    reconnect_grace_ms: int = C.RECONNECT_GRACE_MS
    log_level: str = "INFO"
    log_json: bool = True
    default_options: Optional[ConnectionOptions] = None

    @property
    def reconnect_grace_s(self) -> float:
        return self.reconnect_grace_ms / C.SECOND_MS

    @classmethod
    def from_env(cls) -> Result[ClientConfig, str]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with SOCKET_SESSION_.
        Example: SOCKET_SESSION_LOG_LEVEL=DEBUG,
        SOCKET_SESSION_OPTIONS='{"transports": ["websocket"]}'
        """
        prefix = C.ENV_PREFIX
        try:
            default_options = None
            raw_options = os.getenv(f"{prefix}OPTIONS")
            if raw_options:
                wire = json.loads(raw_options)
                if not isinstance(wire, dict):
                    return Err("Configuration error: OPTIONS must be a JSON object")
                default_options = ConnectionOptions.from_wire_format(wire)

            return Ok(cls(
                reconnect_grace_ms=int(
                    os.getenv(f"{prefix}RECONNECT_GRACE_MS", str(C.RECONNECT_GRACE_MS))
                ),
                log_level=os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper(),
                log_json=_parse_bool(os.getenv(f"{prefix}LOG_JSON", "true")),
                default_options=default_options,
            ))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if self.reconnect_grace_ms < 0:
            return Err("reconnect_grace_ms cannot be negative")
        if not isinstance(logging.getLevelName(self.log_level), int):
            return Err(f"Unknown log level: {self.log_level}")
        return Ok(None)
