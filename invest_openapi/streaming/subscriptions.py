"""
Subscribe/unsubscribe control messages for the market-data stream.

Requests are fire-and-forget: a successful call only means the frame was
written. Rejections come back as ``error`` events carrying the request_id.
"""

import json
from typing import Any, Dict, Optional, Union

from invest_openapi.base_models import MAX_ORDERBOOK_DEPTH, CandleInterval

from .connection import StreamingConnection
from .exceptions import InvalidDepthError, InvalidInstrumentError, InvalidIntervalError


def validate_depth(depth: int) -> int:
    """Reject order book depths outside 1..MAX_ORDERBOOK_DEPTH."""
    if isinstance(depth, bool) or not isinstance(depth, int) or not 1 <= depth <= MAX_ORDERBOOK_DEPTH:
        raise InvalidDepthError(
            f"invalid depth {depth!r}. Should be in interval 0 < x <= {MAX_ORDERBOOK_DEPTH}"
        )
    return depth


def validate_figi(figi: str) -> str:
    if not isinstance(figi, str) or not figi.strip():
        raise InvalidInstrumentError("figi must be a non-empty string")
    return figi


def validate_interval(interval: Union[CandleInterval, str]) -> CandleInterval:
    try:
        return CandleInterval(interval)
    except ValueError as exc:
        raise InvalidIntervalError(f"unsupported candle interval {interval!r}") from exc


def build_control_message(
    channel: str,
    action: str,
    figi: str,
    request_id: str,
    **params: Any,
) -> str:
    """
    Serialize a control frame.

    Keys are emitted in wire order: event, request_id, figi, then params.
    """
    message: Dict[str, Any] = {
        "event": f"{channel}:{action}",
        "request_id": request_id,
        "figi": figi,
    }
    message.update(params)
    return json.dumps(message, separators=(",", ":"))


class SubscriptionController:
    """Sends typed subscribe/unsubscribe requests over the shared connection."""

    def __init__(self, connection: StreamingConnection, logger: Optional[Any] = None):
        self.connection = connection
        self.logger = logger

    def set_logger(self, logger):
        """Set the logger instance."""
        self.logger = logger

    def _log(self, message: str, level: str = "INFO"):
        """Log message using the logger if available."""
        if self.logger and hasattr(self.logger, 'log'):
            self.logger.log(message, level)

    async def _send(self, channel: str, action: str, figi: str, request_id: str, **params: Any) -> None:
        message = build_control_message(channel, action, validate_figi(figi), request_id, **params)
        await self.connection.send_text(message)
        self._log(f"[STREAMING] Sent {channel}:{action} for {figi} (request_id={request_id})", "DEBUG")

    async def subscribe_candle(
        self, figi: str, interval: Union[CandleInterval, str], request_id: str
    ) -> None:
        interval = validate_interval(interval)
        await self._send("candle", "subscribe", figi, request_id, interval=interval.value)

    async def unsubscribe_candle(
        self, figi: str, interval: Union[CandleInterval, str], request_id: str
    ) -> None:
        interval = validate_interval(interval)
        await self._send("candle", "unsubscribe", figi, request_id, interval=interval.value)

    async def subscribe_orderbook(self, figi: str, depth: int, request_id: str) -> None:
        await self._send("orderbook", "subscribe", figi, request_id, depth=validate_depth(depth))

    async def unsubscribe_orderbook(self, figi: str, depth: int, request_id: str) -> None:
        await self._send("orderbook", "unsubscribe", figi, request_id, depth=validate_depth(depth))

    async def subscribe_instrument_info(self, figi: str, request_id: str) -> None:
        await self._send("instrument_info", "subscribe", figi, request_id)

    async def unsubscribe_instrument_info(self, figi: str, request_id: str) -> None:
        await self._send("instrument_info", "unsubscribe", figi, request_id)
