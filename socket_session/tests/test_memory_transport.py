"""
Unit Tests: Loopback Transport

Tests:
    - URL and event name validation
    - Session ids and status messages on the inbound feed
    - Not-connected failures and scripted failures
"""

import asyncio

import pytest

from socket_session.core.errors import (
    SocketConnectionError,
    SocketEmissionError,
    SocketEventError,
    SocketInvalidUrlError,
    SocketNotConnectedError,
)
from socket_session.transport.memory import InMemoryTransport
from socket_session.transport.protocols import SocketTransport, validate_url


async def next_message(feed):
    return await asyncio.wait_for(feed.__anext__(), 1.0)


class TestValidateUrl:

    @pytest.mark.parametrize("url", [
        "http://localhost:3001",
        "https://example.com/chat",
        "ws://a",
        "wss://a:443",
    ])
    def test_accepted(self, url):
        validate_url(url)

    def test_empty(self):
        with pytest.raises(SocketInvalidUrlError) as info:
            validate_url("")
        assert info.value.message == "URL cannot be empty"

    @pytest.mark.parametrize("url", ["ftp://a", "localhost:3001", "not a url"])
    def test_malformed(self, url):
        with pytest.raises(SocketInvalidUrlError):
            validate_url(url)


class TestLoopback:

    def test_is_a_transport(self):
        assert isinstance(InMemoryTransport(), SocketTransport)

    def test_connect_pushes_status(self):
        async def scenario():
            transport = InMemoryTransport()
            feed = transport.inbound()
            first = await transport.connect("ws://a")
            message = await next_message(feed)
            await transport.disconnect()
            second = await transport.connect("ws://a")
            return first, second, message, await next_message(feed)

        first, second, message, after = asyncio.run(scenario())
        assert (first, second) == ("s1", "s2")
        assert message == {"type": "status", "payload": {"status": "connected", "socketId": "s1"}}
        assert after == {"type": "status", "payload": {"status": "disconnected"}}

    def test_invalid_url_before_failure_script(self):
        async def scenario():
            transport = InMemoryTransport()
            transport.fail_next("connect", SocketConnectionError(message="down"))
            with pytest.raises(SocketInvalidUrlError):
                await transport.connect("")
            with pytest.raises(SocketConnectionError):
                await transport.connect("ws://a")
            return transport

        transport = asyncio.run(scenario())
        assert not transport.connected
        assert transport.count("connect") == 2

    def test_listen_requires_session(self):
        async def scenario():
            transport = InMemoryTransport()
            with pytest.raises(SocketNotConnectedError):
                await transport.listen("x")
            with pytest.raises(SocketEventError):
                await transport.listen("")
            with pytest.raises(SocketEmissionError):
                await transport.emit("", 1)
            with pytest.raises(SocketNotConnectedError):
                await transport.emit("x", 1)

        asyncio.run(scenario())

    def test_server_emit_only_for_listened(self):
        async def scenario():
            transport = InMemoryTransport(auto_status=False)
            received = []

            async def collect():
                async for message in transport.inbound():
                    received.append(message)

            consumer = asyncio.create_task(collect())
            await transport.connect("ws://a")
            await transport.listen("x")
            await transport.server_emit("y", 1)
            await transport.server_emit("x", 2)
            consumer.cancel()
            return received

        assert asyncio.run(scenario()) == [
            {"type": "socket_event", "payload": {"event": "x", "data": 2}},
        ]

    def test_new_session_forgets_listens(self):
        async def scenario():
            transport = InMemoryTransport(auto_status=False)
            await transport.connect("ws://a")
            await transport.listen("x")
            await transport.connect("ws://a")
            return transport.listened

        assert asyncio.run(scenario()) == frozenset()

    def test_drop_connection(self):
        async def scenario():
            transport = InMemoryTransport(auto_status=False)
            await transport.connect("ws://a")
            transport.drop_connection()
            with pytest.raises(SocketNotConnectedError):
                await transport.emit("x", 1)
            return transport.emitted

        assert asyncio.run(scenario()) == []
