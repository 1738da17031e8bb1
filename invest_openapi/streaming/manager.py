"""
Streaming client for the market-data websocket.

Orchestrates the connection, subscription requests, and the event dispatch
loop. Typical use::

    client = await StreamingClient.connect(token)
    reader = asyncio.create_task(client.run_read_loop(on_event))
    await client.subscribe_candle("BBG005DXJS36", CandleInterval.MIN_5, new_request_id())
    ...
    await client.close()
    await reader  # raises StreamingReadError once the connection is gone
"""

import inspect
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Union

import aiohttp

from helpers.unified_logger import get_streaming_logger
from invest_openapi.base_models import STREAMING_API_URL, CandleInterval, validate_token
from invest_openapi.config import StreamingSettings

from .connection import StreamingConnection
from .message_handler import StreamMessageHandler
from .models import Event
from .subscriptions import SubscriptionController

EventHandler = Callable[[Event], Optional[Awaitable[None]]]


class StreamingClient:
    """
    Market-data stream over a single websocket connection.

    Instances are created with :meth:`connect`, which only returns once the
    handshake succeeded. Subscription calls and the read loop may run in
    separate tasks; writes are serialized by the connection.
    """

    def __init__(
        self,
        connection: StreamingConnection,
        logger: Optional[Any] = None,
    ):
        self.connection = connection
        self.logger = logger
        self.message_handler = StreamMessageHandler(logger=logger)
        self.subscriptions = SubscriptionController(connection, logger=logger)

    @classmethod
    async def connect(
        cls,
        token: str,
        api_url: str = STREAMING_API_URL,
        *,
        logger: Optional[Any] = None,
        session: Optional[aiohttp.ClientSession] = None,
        handshake_timeout: float = StreamingConnection.HANDSHAKE_TIMEOUT,
        pong_timeout: float = StreamingConnection.PONG_TIMEOUT,
    ) -> "StreamingClient":
        """
        Open the stream or fail without leaving anything open.

        Args:
            token: OpenAPI token
            api_url: Streaming endpoint, override for sandbox or test servers
            logger: Logger instance (defaults to the unified streaming logger)
            session: Optional externally managed aiohttp session
            handshake_timeout: Seconds allowed for the handshake
            pong_timeout: Seconds allowed for each keep-alive reply

        Raises:
            MissingTokenError: Token is empty or a placeholder
            StreamingForbiddenError: Token was rejected (HTTP 403)
            StreamingUnauthorizedError: Token was not received (HTTP 401)
            StreamingConnectError: Any other connection failure
        """
        token = validate_token(token)
        if logger is None:
            logger = get_streaming_logger()

        connection = StreamingConnection(
            token,
            api_url,
            session=session,
            handshake_timeout=handshake_timeout,
            pong_timeout=pong_timeout,
            logger=logger,
        )
        await connection.open()
        return cls(connection, logger=logger)

    @classmethod
    async def from_settings(
        cls,
        settings: StreamingSettings,
        *,
        logger: Optional[Any] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "StreamingClient":
        """Connect using a :class:`StreamingSettings` instance."""
        return await cls.connect(
            settings.token,
            settings.streaming_url,
            logger=logger,
            session=session,
            handshake_timeout=settings.handshake_timeout,
            pong_timeout=settings.pong_timeout,
        )

    def set_logger(self, logger):
        """Set the logger instance for all components."""
        self.logger = logger
        self.connection.set_logger(logger)
        self.message_handler.set_logger(logger)
        self.subscriptions.set_logger(logger)

    def _log(self, message: str, level: str = "INFO"):
        """Log message using the logger if available."""
        if self.logger and hasattr(self.logger, 'log'):
            self.logger.log(message, level)

    async def __aenter__(self) -> "StreamingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self.connection.closed

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    async def events(self) -> AsyncIterator[Event]:
        """
        Yield typed events in wire order.

        Malformed frames and unknown event kinds are logged and skipped.

        Raises:
            StreamingReadError: The connection can no longer be read
        """
        while True:
            raw_message = await self.connection.receive_frame()
            event = self.message_handler.process_message(raw_message)
            if event is not None:
                yield event

    async def run_read_loop(self, handler: EventHandler) -> None:
        """
        Deliver every event to ``handler`` until the connection fails.

        ``handler`` may be a plain function or a coroutine function. If it
        raises, the loop stops before reading another frame and the exception
        propagates unchanged.

        Raises:
            StreamingReadError: The connection closed or errored
        """
        events = self.events()
        try:
            async for event in events:
                try:
                    result = handler(event)
                    if inspect.isawaitable(result):
                        await result
                except Exception as exc:
                    self._log(f"[STREAMING] Event handler failed on {event.kind}: {exc!r}", "ERROR")
                    raise
        finally:
            await events.aclose()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    async def subscribe_candle(
        self, figi: str, interval: Union[CandleInterval, str], request_id: str
    ) -> None:
        await self.subscriptions.subscribe_candle(figi, interval, request_id)

    async def unsubscribe_candle(
        self, figi: str, interval: Union[CandleInterval, str], request_id: str
    ) -> None:
        await self.subscriptions.unsubscribe_candle(figi, interval, request_id)

    async def subscribe_orderbook(self, figi: str, depth: int, request_id: str) -> None:
        await self.subscriptions.subscribe_orderbook(figi, depth, request_id)

    async def unsubscribe_orderbook(self, figi: str, depth: int, request_id: str) -> None:
        await self.subscriptions.unsubscribe_orderbook(figi, depth, request_id)

    async def subscribe_instrument_info(self, figi: str, request_id: str) -> None:
        await self.subscriptions.subscribe_instrument_info(figi, request_id)

    async def unsubscribe_instrument_info(self, figi: str, request_id: str) -> None:
        await self.subscriptions.unsubscribe_instrument_info(figi, request_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        await self.connection.close()
