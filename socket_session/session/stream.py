"""
Status Stream: Multi-Subscriber Broadcast of Status Events

Every subscriber receives every event published after it subscribed;
nothing is replayed. Each subscription owns an unbounded queue and is
consumed as an async iterator that ends once the stream (or the
subscription) is closed.

Usage:
    async for event in manager.status_stream.subscribe():
        print(event.status)
"""

from __future__ import annotations

import asyncio
from typing import Optional

from socket_session.session.state_machine import StatusEvent


class StatusSubscription:
    """One consumer's view of the stream."""

    __slots__ = ("_stream", "_queue", "_closed")

    def __init__(self, stream: Optional[StatusStream]) -> None:
        self._stream = stream
        self._queue: asyncio.Queue[Optional[StatusEvent]] = asyncio.Queue()
        self._closed = False
        if stream is None:
            self._finish()

    def __aiter__(self) -> StatusSubscription:
        return self

    async def __anext__(self) -> StatusEvent:
        event = await self._queue.get()
        if event is None:
            # Keep the sentinel so later iterations also stop
            self._queue.put_nowait(None)
            raise StopAsyncIteration
        return event

    def __enter__(self) -> StatusSubscription:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    async def next(self, timeout: Optional[float] = None) -> StatusEvent:
        """
        Wait for the next event.

        Raises:
            StopAsyncIteration: the subscription is closed and drained
            asyncio.TimeoutError: nothing arrived within `timeout` seconds
        """
        return await asyncio.wait_for(self.__anext__(), timeout)

    def drain(self) -> list[StatusEvent]:
        """Return every event already delivered, without waiting."""
        events: list[StatusEvent] = []
        while not self._queue.empty():
            event = self._queue.get_nowait()
            if event is None:
                self._queue.put_nowait(None)
                break
            events.append(event)
        return events

    def close(self) -> None:
        """Unsubscribe; iteration ends after already queued events."""
        if self._stream is not None:
            self._stream._unsubscribe(self)
            self._stream = None
        self._finish()

    def _deliver(self, event: StatusEvent) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    def _finish(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)


class StatusStream:
    """
    Broadcast channel owned by the session manager.

    publish() and close() belong to the owner; consumers only get
    subscriptions (see StatusStreamView).
    """

    __slots__ = ("_subscribers", "_closed")

    def __init__(self) -> None:
        self._subscribers: list[StatusSubscription] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> StatusSubscription:
        """Subscribe from now on. A closed stream yields a finished subscription."""
        if self._closed:
            return StatusSubscription(None)
        subscription = StatusSubscription(self)
        self._subscribers.append(subscription)
        return subscription

    def publish(self, event: StatusEvent) -> bool:
        """Fan `event` out to every subscriber. False once closed."""
        if self._closed:
            return False
        for subscription in list(self._subscribers):
            subscription._deliver(event)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        subscribers, self._subscribers = self._subscribers, []
        for subscription in subscribers:
            subscription._stream = None
            subscription._finish()

    def _unsubscribe(self, subscription: StatusSubscription) -> None:
        try:
            self._subscribers.remove(subscription)
        except ValueError:
            pass


class StatusStreamView:
    """Subscribe-only facade over a StatusStream."""

    __slots__ = ("_stream",)

    def __init__(self, stream: StatusStream) -> None:
        self._stream = stream

    def subscribe(self) -> StatusSubscription:
        return self._stream.subscribe()

    @property
    def closed(self) -> bool:
        return self._stream.closed
