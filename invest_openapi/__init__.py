"""
Client binding for the invest OpenAPI market-data stream.
"""

from .base_models import (
    MAX_ORDERBOOK_DEPTH,
    STREAMING_API_URL,
    CandleInterval,
    MissingTokenError,
    TradingStatus,
    new_request_id,
)
from .config import StreamingSettings
from .streaming import StreamingClient

__all__ = [
    "StreamingClient",
    "StreamingSettings",
    "CandleInterval",
    "TradingStatus",
    "MissingTokenError",
    "MAX_ORDERBOOK_DEPTH",
    "STREAMING_API_URL",
    "new_request_id",
]
