"""Fakes for the aiohttp websocket used by the streaming client."""

import asyncio
import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import aiohttp

TEST_URL = "wss://stream.test/ws"


class FakeWebSocket:
    """Replays queued frames; reports CLOSED once they run out."""

    def __init__(self, frames: Optional[List[Any]] = None, block_when_empty: bool = False):
        self.frames: List[aiohttp.WSMessage] = [to_message(frame) for frame in (frames or [])]
        self.block_when_empty = block_when_empty
        self.sent: List[str] = []
        self.pongs: List[bytes] = []
        self.closed = False
        self.close_code: Optional[int] = None
        self.close_calls = 0
        self.send_error: Optional[BaseException] = None
        self.pong_error: Optional[BaseException] = None
        self.pong_delay = 0.0
        self._closed_event = asyncio.Event()

    async def receive(self) -> aiohttp.WSMessage:
        if self.frames:
            return self.frames.pop(0)
        if self.block_when_empty and not self.closed:
            await self._closed_event.wait()
        self.closed = True
        return aiohttp.WSMessage(aiohttp.WSMsgType.CLOSED, None, None)

    async def send_str(self, data: str) -> None:
        if self.send_error:
            raise self.send_error
        self.sent.append(data)

    async def pong(self, message: bytes = b"") -> None:
        if self.pong_delay:
            await asyncio.sleep(self.pong_delay)
        if self.pong_error:
            raise self.pong_error
        self.pongs.append(message)

    async def close(self) -> bool:
        self.close_calls += 1
        self.closed = True
        self.close_code = 1000
        self._closed_event.set()
        return True


class FakeSession:
    """Stands in for aiohttp.ClientSession.ws_connect."""

    def __init__(self, ws: Optional[FakeWebSocket] = None, error: Optional[BaseException] = None, delay: float = 0.0):
        self.ws = ws
        self.error = error
        self.delay = delay
        self.closed = False
        self.calls: List[Dict[str, Any]] = []

    async def ws_connect(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.calls.append({"url": url, **kwargs})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.ws

    async def close(self) -> None:
        self.closed = True


def to_message(frame: Any) -> aiohttp.WSMessage:
    if isinstance(frame, aiohttp.WSMessage):
        return frame
    if isinstance(frame, dict):
        frame = json.dumps(frame)
    return aiohttp.WSMessage(aiohttp.WSMsgType.TEXT, frame, None)


def ping(payload: bytes = b"keepalive") -> aiohttp.WSMessage:
    return aiohttp.WSMessage(aiohttp.WSMsgType.PING, payload, None)


def handshake_error(status: int) -> aiohttp.WSServerHandshakeError:
    return aiohttp.WSServerHandshakeError(
        request_info=MagicMock(),
        history=(),
        status=status,
        message="Invalid response status",
    )


def logged_messages(logger: MagicMock, level: Optional[str] = None) -> List[str]:
    messages = []
    for call in logger.log.call_args_list:
        message, call_level = call.args[0], call.args[1] if len(call.args) > 1 else "INFO"
        if level is None or call_level == level:
            messages.append(message)
    return messages
