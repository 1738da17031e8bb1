"""Fixtures for streaming client tests."""

import pytest

from fakes import TEST_URL, FakeSession, FakeWebSocket
from invest_openapi.streaming.connection import KeepAliveResponder, StreamingConnection
from invest_openapi.streaming.manager import StreamingClient


@pytest.fixture
def make_client(logger):
    """Build a StreamingClient wired to a FakeWebSocket without a handshake."""

    def _make(frames=None, *, block_when_empty: bool = False, pong_timeout: float = 1.0):
        ws = FakeWebSocket(frames, block_when_empty=block_when_empty)
        connection = StreamingConnection("token", TEST_URL, session=FakeSession(ws), logger=logger)
        connection.ws = ws
        connection.keepalive = KeepAliveResponder(
            ws, connection._write_lock, timeout=pong_timeout, logger=logger
        )
        return StreamingClient(connection, logger=logger), ws

    return _make
