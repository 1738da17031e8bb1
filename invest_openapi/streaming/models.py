"""
Typed market-data events delivered by the streaming client.

Every inbound frame shares the envelope ``{"event": ..., "time": ..., "payload": {...}}``.
The ``event`` field selects one of the closed set of event models below.
"""

from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Type, Union

from pydantic import BaseModel, Field, field_validator

from invest_openapi.base_models import CandleInterval, TradingStatus


class EventEnvelope(BaseModel):
    """Minimal shape used only to discover an event's kind."""
    kind: str = Field(..., alias="event")


class PriceQuantity(NamedTuple):
    """One order book level, sent on the wire as ``[price, quantity]``."""
    price: float
    quantity: float


class Candle(BaseModel):
    """OHLCV bar for one instrument and interval."""
    figi: str
    # Values the server adds later are kept as plain strings
    interval: Union[CandleInterval, str] = Field(..., union_mode="left_to_right")
    open_price: float = Field(..., alias="o")
    close_price: float = Field(..., alias="c")
    high_price: float = Field(..., alias="h")
    low_price: float = Field(..., alias="l")
    volume: float = Field(..., alias="v")
    ts: datetime = Field(..., alias="time")

    class Config:
        populate_by_name = True
        frozen = True


class OrderBook(BaseModel):
    """Order book snapshot limited to the subscribed depth."""
    figi: str
    depth: int
    bids: List[PriceQuantity] = Field(default_factory=list)
    asks: List[PriceQuantity] = Field(default_factory=list)

    @field_validator("bids", "asks", mode="before")
    @classmethod
    def _null_side_is_empty(cls, value):
        return [] if value is None else value

    class Config:
        frozen = True


class InstrumentInfo(BaseModel):
    """Trading status and price limits for an instrument."""
    figi: str
    trade_status: Union[TradingStatus, str] = Field(..., union_mode="left_to_right")
    min_price_increment: float
    lot: float
    accrued_interest: Optional[float] = None
    limit_up: Optional[float] = None
    limit_down: Optional[float] = None

    class Config:
        frozen = True


class StreamError(BaseModel):
    """Error reported by the server, usually for a rejected subscription."""
    request_id: Optional[str] = None
    error: str

    class Config:
        frozen = True


class StreamEvent(BaseModel):
    """Fields common to every event variant."""
    kind: str = Field(..., alias="event")
    time: datetime

    class Config:
        populate_by_name = True
        frozen = True


class CandleEvent(StreamEvent):
    candle: Candle = Field(..., alias="payload")


class OrderBookEvent(StreamEvent):
    order_book: OrderBook = Field(..., alias="payload")


class InstrumentInfoEvent(StreamEvent):
    info: InstrumentInfo = Field(..., alias="payload")


class ErrorEvent(StreamEvent):
    error: StreamError = Field(..., alias="payload")


Event = Union[CandleEvent, OrderBookEvent, InstrumentInfoEvent, ErrorEvent]

# Closed registry of event kinds; anything else is reported as unknown.
EVENT_MODELS: Dict[str, Type[StreamEvent]] = {
    "candle": CandleEvent,
    "orderbook": OrderBookEvent,
    "instrument_info": InstrumentInfoEvent,
    "error": ErrorEvent,
}
