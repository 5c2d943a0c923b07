"""
Unit Tests: Error Taxonomy

Tests:
    - Error kinds per class
    - Canonical constructor messages and cause chaining
    - Transport code mapping with operation fallback
    - Serialization for logging
"""

import pytest

from socket_session.core.errors import (
    ErrorKind,
    GenericSocketError,
    SocketConnectionError,
    SocketDisconnectionError,
    SocketEmissionError,
    SocketError,
    SocketEventError,
    SocketInvalidUrlError,
    SocketNotConnectedError,
    SocketTimeoutError,
    error_from_code,
    kind_for_code,
)


class TestErrorKinds:
    """Every class carries exactly one kind."""

    @pytest.mark.parametrize("error_type,kind", [
        (SocketConnectionError, ErrorKind.CONNECTION_FAILED),
        (SocketTimeoutError, ErrorKind.CONNECTION_TIMEOUT),
        (SocketInvalidUrlError, ErrorKind.INVALID_URL),
        (SocketNotConnectedError, ErrorKind.NOT_CONNECTED),
        (SocketEventError, ErrorKind.EVENT_ERROR),
        (SocketEmissionError, ErrorKind.EMISSION_FAILED),
        (SocketDisconnectionError, ErrorKind.DISCONNECTION_FAILED),
        (GenericSocketError, ErrorKind.GENERIC),
    ])
    def test_kind(self, error_type, kind):
        error = error_type(message="x")
        assert error.kind is kind
        assert isinstance(error, SocketError)
        assert isinstance(error, Exception)

    def test_taxonomy_is_closed(self):
        assert len(ErrorKind) == 8


class TestConstructors:
    """Tests for canonical messages."""

    def test_connection_wrap(self):
        cause = RuntimeError("refused")
        error = SocketConnectionError.wrap(cause)

        assert error.message == "Connection failed: refused"
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_reconnect_preconditions(self):
        assert "No previous connection" in SocketConnectionError.no_previous_connection().message
        assert "No socket ID callback" in SocketConnectionError.no_session_callback().message

    def test_invalid_url(self):
        assert SocketInvalidUrlError.empty().message == "URL cannot be empty"
        error = SocketInvalidUrlError.malformed("ftp://x")
        assert error.message == "Invalid URL format: ftp://x"
        assert error.code == "INVALID_URL"

    def test_not_connected(self):
        error = SocketNotConnectedError.default()
        assert error.message == "Socket is not connected"
        assert error.code == "NOT_CONNECTED"

    def test_event_errors(self):
        cause = ValueError("bad")
        assert SocketEventError.listen_failed("chat", cause).message == (
            'Failed to listen to event "chat": bad'
        )
        error = SocketEventError.unlisten_failed("chat", cause)
        assert error.message == 'Failed to stop listening to event "chat": bad'
        assert error.cause is cause

    def test_emission_errors(self):
        error = SocketEmissionError.emit_failed("chat", OSError("closed"))
        assert error.message == 'Failed to emit event "chat": closed'
        payload_error = SocketEmissionError.unsupported_payload("chat", object())
        assert "object" in payload_error.message

    def test_disconnect_wrap(self):
        error = SocketDisconnectionError.wrap(RuntimeError("stuck"))
        assert error.message == "Failed to disconnect: stuck"

    def test_raise_and_catch_by_base(self):
        with pytest.raises(SocketError) as info:
            raise SocketTimeoutError(message="slow", code="CONNECTION_TIMEOUT")
        assert info.value.kind is ErrorKind.CONNECTION_TIMEOUT


class TestFormatting:
    """Tests for str / to_dict."""

    def test_str_with_code(self):
        error = SocketConnectionError(message="boom", code="CONNECTION_FAILED")
        assert str(error) == "SocketConnectionError: boom (Code: CONNECTION_FAILED)"

    def test_str_without_code(self):
        assert str(GenericSocketError(message="boom")) == "GenericSocketError: boom"

    def test_to_dict(self):
        error = SocketEventError(message="m", code="EVENT_ERROR", context={"event": "e"})
        data = error.to_dict()

        assert data["kind"] == "EVENT_ERROR"
        assert data["code"] == "EVENT_ERROR"
        assert data["message"] == "m"
        assert data["context"] == {"event": "e"}
        assert data["error_id"] == error.error_id
        assert data["timestamp_nanos"] > 0

    def test_unique_ids(self):
        assert GenericSocketError(message="a").error_id != GenericSocketError(message="a").error_id


class TestCodeMapping:
    """Tests for transport code mapping."""

    @pytest.mark.parametrize("kind", list(ErrorKind))
    def test_known_codes(self, kind):
        if kind is ErrorKind.GENERIC:
            return
        assert kind_for_code(kind.value, "connect") is kind

    @pytest.mark.parametrize("operation,kind", [
        ("connect", ErrorKind.CONNECTION_FAILED),
        ("listen", ErrorKind.EVENT_ERROR),
        ("unlisten", ErrorKind.EVENT_ERROR),
        ("emit", ErrorKind.EMISSION_FAILED),
        ("disconnect", ErrorKind.DISCONNECTION_FAILED),
        ("something_else", ErrorKind.GENERIC),
    ])
    def test_unknown_code_falls_back_on_operation(self, operation, kind):
        assert kind_for_code("WEIRD", operation) is kind
        assert kind_for_code(None, operation) is kind
        assert kind_for_code("GENERIC", operation) is kind

    def test_error_from_code(self):
        cause = RuntimeError("x")
        error = error_from_code("CONNECTION_TIMEOUT", "took too long", "connect", cause)

        assert isinstance(error, SocketTimeoutError)
        assert error.message == "took too long"
        assert error.code == "CONNECTION_TIMEOUT"
        assert error.context == {"operation": "connect"}
        assert error.cause is cause

    def test_error_from_unknown_code_keeps_code(self):
        error = error_from_code("E42", None, "emit")

        assert isinstance(error, SocketEmissionError)
        assert error.code == "E42"
        assert error.message == "Unknown error"
