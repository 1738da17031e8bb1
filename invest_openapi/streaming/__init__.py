"""
Streaming market-data package.

This package contains the modular streaming client implementation:
- manager: Main StreamingClient class
- connection: Handshake, keep-alive, and serialized writes
- subscriptions: Subscribe/unsubscribe control messages
- message_handler: Frame decoding and routing
- models: Typed event variants
"""

from .exceptions import (
    InvalidDepthError,
    InvalidInstrumentError,
    InvalidIntervalError,
    StreamingConnectError,
    StreamingError,
    StreamingForbiddenError,
    StreamingReadError,
    StreamingSendError,
    StreamingUnauthorizedError,
    SubscriptionValidationError,
)
from .manager import StreamingClient
from .models import (
    Candle,
    CandleEvent,
    ErrorEvent,
    Event,
    InstrumentInfo,
    InstrumentInfoEvent,
    OrderBook,
    OrderBookEvent,
    PriceQuantity,
    StreamError,
)

__all__ = [
    "StreamingClient",
    "Event",
    "Candle",
    "CandleEvent",
    "OrderBook",
    "OrderBookEvent",
    "PriceQuantity",
    "InstrumentInfo",
    "InstrumentInfoEvent",
    "StreamError",
    "ErrorEvent",
    "StreamingError",
    "StreamingConnectError",
    "StreamingForbiddenError",
    "StreamingUnauthorizedError",
    "StreamingSendError",
    "StreamingReadError",
    "SubscriptionValidationError",
    "InvalidDepthError",
    "InvalidInstrumentError",
    "InvalidIntervalError",
]
