"""
Client-Wide Constants

All magic numbers, wire keys and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# TIME UNITS
# =============================================================================
SECOND_MS: Final[int] = 1000

# =============================================================================
# SESSION MANAGER
# =============================================================================
# Pause between tearing down a session and opening the replacement
RECONNECT_GRACE_MS: Final[int] = 100

UNKNOWN_ERROR_REASON: Final[str] = "Unknown error"

# =============================================================================
# INBOUND FEED MESSAGE TYPES
# =============================================================================
MESSAGE_STATUS: Final[str] = "status"
MESSAGE_SOCKET_EVENT: Final[str] = "socket_event"

# =============================================================================
# URL SCHEMES ACCEPTED BY THE TRANSPORTS
# =============================================================================
ACCEPTED_SCHEME_PREFIXES: Final[tuple[str, ...]] = ("http", "ws")

# =============================================================================
# ENVIRONMENT
# =============================================================================
ENV_PREFIX: Final[str] = "SOCKET_SESSION_"
