#!/usr/bin/env python3
"""
Socket Session demo client

Connects to a Socket.IO server, prints status transitions and received
events for a while, then disconnects.

Usage:
    python -m socket_session http://localhost:3001
    python -m socket_session http://localhost:3001 --event chat --emit chat '{"text": "hi"}'

    # Or with environment config
    SOCKET_SESSION_LOG_LEVEL=DEBUG SOCKET_SESSION_LOG_JSON=false \\
        python -m socket_session ws://localhost:3001
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional, Sequence

from socket_session.core.config import ClientConfig
from socket_session.core.errors import SocketError
from socket_session.core.types import EventData
from socket_session.observability.logging import LogLevel, setup_logging
from socket_session.session.manager import SessionManager
from socket_session.session.stream import StatusSubscription
from socket_session.transport.socketio_client import SocketIOTransport


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="socket_session",
        description="Connect to a Socket.IO server and print what happens.",
    )
    parser.add_argument("url", help="server url (http, https, ws or wss)")
    parser.add_argument(
        "--event", action="append", default=[], metavar="NAME",
        help="event name to print (repeatable)",
    )
    parser.add_argument(
        "--emit", nargs=2, action="append", default=[], metavar=("NAME", "DATA"),
        help="event to send after connecting; DATA is parsed as JSON when possible",
    )
    parser.add_argument(
        "--seconds", type=float, default=10.0,
        help="how long to stay connected (default: 10)",
    )
    return parser.parse_args(argv)


def parse_payload(raw: str) -> EventData:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


async def print_status(subscription: StatusSubscription) -> None:
    async for event in subscription:
        if event.session_id:
            print(f"status: {event.status.value} ({event.session_id})")
        elif event.reason:
            print(f"status: {event.status.value} ({event.reason})")
        else:
            print(f"status: {event.status.value}")


async def run_demo(args: argparse.Namespace, config: ClientConfig) -> int:
    manager = SessionManager(SocketIOTransport(), config)
    printer = asyncio.create_task(print_status(manager.status_stream.subscribe()))

    for name in args.event:
        await manager.on(name, lambda data, name=name: print(f"event {name}: {data!r}"))

    try:
        session_id = await manager.connect(
            args.url,
            on_session_id=lambda sid: print(f"session id: {sid}"),
        )
        print(f"✓ Connected as {session_id}")

        for name, raw in args.emit:
            await manager.emit(name, parse_payload(raw))
            print(f"→ Sent {name}")

        await asyncio.sleep(args.seconds)
        await manager.disconnect()
        return 0
    except SocketError as e:
        print(f"Error: {e}")
        return 1
    finally:
        manager.dispose()
        await printer


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Synchronous entry point."""
    args = parse_args(argv)

    config_result = ClientConfig.from_env()
    if config_result.is_err():
        print(config_result.error)
        return 1
    config = config_result.unwrap()

    validation = config.validate()
    if validation.is_err():
        print(f"Validation error: {validation.error}")
        return 1

    try:
        level = LogLevel.from_name(config.log_level)
    except KeyError:
        level = LogLevel.INFO
    setup_logging(level, json_output=config.log_json)

    try:
        return asyncio.run(run_demo(args, config))
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
