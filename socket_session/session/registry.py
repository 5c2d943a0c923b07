"""
Listener Registry: Pending and Active Event Subscriptions

Two maps keyed by event name:
    pending  → callbacks requested while no session existed
    active   → callbacks registered with the transport, tagged with the
               session id they were registered under

An active entry whose session id differs from the live session is stale:
the transport forgot it when that session ended, so promotion registers
it again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from socket_session.core.types import EventCallback


@dataclass(frozen=True, slots=True)
class ActiveListener:
    callback: EventCallback
    session_id: str


class ListenerRegistry:
    """
    Bookkeeping only; never talks to the transport.

    Callers serialize access (single event loop).
    """

    __slots__ = ("_active", "_pending")

    def __init__(self) -> None:
        self._active: dict[str, ActiveListener] = {}
        self._pending: dict[str, EventCallback] = {}

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    @property
    def active_events(self) -> frozenset[str]:
        return frozenset(self._active)

    @property
    def pending_events(self) -> frozenset[str]:
        return frozenset(self._pending)

    def is_active(self, event: str) -> bool:
        return event in self._active

    def is_live(self, event: str, session_id: str) -> bool:
        """Active and registered under the current session."""
        entry = self._active.get(event)
        return entry is not None and entry.session_id == session_id

    def callback_for(self, event: str) -> Optional[EventCallback]:
        entry = self._active.get(event)
        return entry.callback if entry is not None else None

    def pending_items(self) -> list[tuple[str, EventCallback]]:
        return list(self._pending.items())

    def stale_items(self, session_id: str) -> list[tuple[str, EventCallback]]:
        return [
            (event, entry.callback)
            for event, entry in self._active.items()
            if entry.session_id != session_id
        ]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def add_pending(self, event: str, callback: EventCallback) -> None:
        # A queued listener supersedes one left over from an earlier session
        self._active.pop(event, None)
        self._pending[event] = callback

    def add_active(self, event: str, callback: EventCallback, session_id: str) -> None:
        self._pending.pop(event, None)
        self._active[event] = ActiveListener(callback, session_id)

    def replace_callback(self, event: str, callback: EventCallback) -> None:
        entry = self._active[event]
        self._active[event] = ActiveListener(callback, entry.session_id)

    def promote(self, event: str, callback: EventCallback, session_id: str) -> bool:
        """
        Move a pending entry to active, unless it was replaced or removed
        while its registration was in flight.
        """
        if self._pending.get(event) is not callback:
            return False
        self.add_active(event, callback, session_id)
        return True

    def refresh(self, event: str, callback: EventCallback, session_id: str) -> bool:
        """Re-tag a stale active entry with the live session id."""
        entry = self._active.get(event)
        if entry is None or entry.callback is not callback:
            return False
        self._active[event] = ActiveListener(callback, session_id)
        return True

    def drop_pending(self, event: str, callback: EventCallback) -> None:
        """Forget a pending entry if it still holds `callback`."""
        if self._pending.get(event) is callback:
            del self._pending[event]

    def discard_pending(self, event: str) -> None:
        self._pending.pop(event, None)

    def discard_active(self, event: str) -> None:
        self._active.pop(event, None)

    def clear(self) -> None:
        self._active.clear()
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._active.keys() | self._pending.keys())
