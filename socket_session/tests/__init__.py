"""
Tests Module: Unit and Integration Tests

Test Coverage:
    - Core types (options, errors, configuration)
    - Status parsing, listener registry, status stream
    - Session manager against the loopback transport
    - python-socketio adapter with a fake client
    - Structured logging
"""
