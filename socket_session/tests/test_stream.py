"""
Unit Tests: Status Stream

Tests:
    - Broadcast to every subscriber
    - No replay of events published before subscribing
    - Iteration ends on close
"""

import asyncio

import pytest

from socket_session.session.state_machine import StatusEvent
from socket_session.session.stream import StatusStream, StatusStreamView


class TestBroadcast:

    def test_every_subscriber_gets_every_event(self):
        stream = StatusStream()
        first = stream.subscribe()
        second = stream.subscribe()

        stream.publish(StatusEvent.connecting())
        stream.publish(StatusEvent.connected("s1"))

        expected = [StatusEvent.connecting(), StatusEvent.connected("s1")]
        assert first.drain() == expected
        assert second.drain() == expected
        assert stream.subscriber_count == 2

    def test_no_replay(self):
        stream = StatusStream()
        stream.publish(StatusEvent.connecting())
        late = stream.subscribe()
        stream.publish(StatusEvent.disconnected())

        assert late.drain() == [StatusEvent.disconnected()]

    def test_unsubscribe(self):
        stream = StatusStream()
        subscription = stream.subscribe()
        subscription.close()
        stream.publish(StatusEvent.connecting())

        assert subscription.closed
        assert subscription.drain() == []
        assert stream.subscriber_count == 0

    def test_context_manager(self):
        stream = StatusStream()
        with stream.subscribe() as subscription:
            stream.publish(StatusEvent.connecting())
        assert subscription.closed
        assert subscription.drain() == [StatusEvent.connecting()]


class TestClose:

    def test_iteration_ends_on_close(self):
        async def scenario():
            stream = StatusStream()
            subscription = stream.subscribe()
            received = []

            async def consume():
                async for event in subscription:
                    received.append(event)

            consumer = asyncio.create_task(consume())
            stream.publish(StatusEvent.connecting())
            stream.publish(StatusEvent.error("boom"))
            stream.close()
            await asyncio.wait_for(consumer, 1.0)
            return received

        received = asyncio.run(scenario())
        assert received == [StatusEvent.connecting(), StatusEvent.error("boom")]

    def test_publish_after_close(self):
        stream = StatusStream()
        subscription = stream.subscribe()
        stream.close()

        assert stream.closed
        assert stream.publish(StatusEvent.connecting()) is False
        assert subscription.drain() == []

    def test_subscribe_after_close(self):
        async def scenario():
            stream = StatusStream()
            stream.close()
            subscription = stream.subscribe()
            return [event async for event in subscription]

        assert asyncio.run(scenario()) == []

    def test_next_timeout(self):
        async def scenario():
            subscription = StatusStream().subscribe()
            await subscription.next(timeout=0.01)

        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(scenario())

    def test_next_after_close(self):
        async def scenario():
            stream = StatusStream()
            subscription = stream.subscribe()
            stream.publish(StatusEvent.connecting())
            stream.close()
            first = await subscription.next(timeout=1.0)
            with pytest.raises(StopAsyncIteration):
                await subscription.next(timeout=1.0)
            return first

        assert asyncio.run(scenario()) == StatusEvent.connecting()


class TestView:

    def test_view_only_subscribes(self):
        stream = StatusStream()
        view = StatusStreamView(stream)
        subscription = view.subscribe()
        stream.publish(StatusEvent.connecting())

        assert subscription.drain() == [StatusEvent.connecting()]
        assert not hasattr(view, "publish")
        assert not view.closed
