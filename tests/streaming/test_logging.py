"""Log records from streaming components point at the method that logged."""

import asyncio

import pytest
from loguru import logger as loguru_logger

from fakes import TEST_URL, FakeSession, FakeWebSocket
from helpers.unified_logger import get_logger
from invest_openapi.streaming.connection import KeepAliveResponder, StreamingConnection
from invest_openapi.streaming.message_handler import StreamMessageHandler


@pytest.fixture
def records():
    captured = []
    sink_id = loguru_logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    loguru_logger.remove(sink_id)


@pytest.fixture
def unified_logger():
    return get_logger("streaming", "test", log_to_console=False, log_file="")


def _functions(records, text):
    return [record["function"] for record in records if text in record["message"]]


@pytest.mark.asyncio
async def test_keepalive_records_caller(records, unified_logger):
    ws = FakeWebSocket()
    ws.closed = True

    await KeepAliveResponder(ws, asyncio.Lock(), logger=unified_logger).respond(b"token")

    assert _functions(records, "Skipping pong") == ["respond"]


@pytest.mark.asyncio
async def test_connection_records_caller(records, unified_logger):
    connection = StreamingConnection("token", TEST_URL, session=FakeSession(FakeWebSocket()), logger=unified_logger)

    await connection.open()
    await connection.close()

    assert _functions(records, "Connected to") == ["open"]
    assert _functions(records, "Connection closed") == ["close"]


def test_message_handler_records_caller(records, unified_logger):
    StreamMessageHandler(logger=unified_logger).process_message("garbage")

    assert _functions(records, "Dropping malformed frame") == ["process_message"]
