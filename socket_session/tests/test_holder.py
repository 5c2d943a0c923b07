"""
Unit Tests: Session Holder

Tests:
    - Lazy creation and reuse
    - destroy() disposes and resets
    - Fresh transport per manager
"""

from socket_session.core.config import ClientConfig
from socket_session.session.holder import SessionHolder
from socket_session.session.manager import SessionManager
from socket_session.transport.memory import InMemoryTransport


class TestSessionHolder:

    def test_lazy_and_reused(self):
        holder = SessionHolder.with_transport(InMemoryTransport)
        assert holder.instance is None

        manager = holder.get()
        assert isinstance(manager, SessionManager)
        assert holder.get() is manager
        assert holder.instance is manager

    def test_destroy(self):
        holder = SessionHolder.with_transport(InMemoryTransport)
        first = holder.get()
        holder.destroy()

        assert first.disposed
        assert holder.instance is None

        second = holder.get()
        assert second is not first
        assert second.transport is not first.transport
        assert not second.disposed

    def test_destroy_is_idempotent(self):
        holder = SessionHolder.with_transport(InMemoryTransport)
        holder.destroy()
        holder.get()
        holder.destroy()
        holder.destroy()
        assert holder.instance is None

    def test_disposed_instance_is_replaced(self):
        holder = SessionHolder.with_transport(InMemoryTransport)
        first = holder.get()
        first.dispose()
        assert holder.get() is not first

    def test_custom_factory(self):
        config = ClientConfig(reconnect_grace_ms=0)
        transport = InMemoryTransport()
        holder = SessionHolder(lambda: SessionManager(transport, config))
        assert holder.get().transport is transport
