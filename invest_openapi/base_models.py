"""
Shared enums, constants, and utilities for the invest OpenAPI clients.
"""

from __future__ import annotations

import random
import string
from enum import Enum
from typing import List, Optional

STREAMING_API_URL = "wss://api-invest.tinkoff.ru/openapi/md/v1/md-openapi/ws"

MAX_ORDERBOOK_DEPTH = 20

REQUEST_ID_LENGTH = 12


class MissingTokenError(Exception):
    """Raised when the API token is missing or still a placeholder."""
    pass


class CandleInterval(str, Enum):
    """Candle bar widths accepted by the market-data stream."""

    MIN_1 = "1min"
    MIN_2 = "2min"
    MIN_3 = "3min"
    MIN_5 = "5min"
    MIN_10 = "10min"
    MIN_15 = "15min"
    MIN_30 = "30min"
    HOUR_1 = "hour"
    HOUR_2 = "2hour"
    HOUR_4 = "4hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TradingStatus(str, Enum):
    """Trading phase reported in instrument_info events."""

    BREAK_IN_TRADING = "break_in_trading"
    NORMAL_TRADING = "normal_trading"
    NOT_AVAILABLE_FOR_TRADING = "not_available_for_trading"
    CLOSING_AUCTION = "closing_auction"
    CLOSING_PERIOD = "closing_period"
    DARK_POOL_AUCTION = "dark_pool_auction"
    DISCRETE_AUCTION = "discrete_auction"
    OPENING_PERIOD = "opening_period"
    OPENING_AUCTION_PERIOD = "opening_auction_period"
    TRADING_AT_CLOSING_AUCTION_PRICE = "trading_at_closing_auction_price"


def validate_token(
    token: Optional[str],
    placeholder_values: Optional[List[str]] = None,
) -> str:
    """
    Validate an API token so obviously unusable values fail before any I/O.

    Args:
        token: Token value (usually from INVEST_TOKEN)
        placeholder_values: List of placeholder values to reject

    Returns:
        The token with surrounding whitespace removed

    Raises:
        MissingTokenError: If the token is missing or is a placeholder
    """
    if placeholder_values is None:
        placeholder_values = [
            "your_token_here",
            "your_api_token_here",
            "PLACEHOLDER",
            "placeholder",
        ]

    cleaned = (token or "").strip()
    if not cleaned:
        raise MissingTokenError("Missing INVEST_TOKEN environment variable")

    if cleaned in placeholder_values:
        raise MissingTokenError("INVEST_TOKEN is not configured (placeholder value)")

    return cleaned


def new_request_id(length: int = REQUEST_ID_LENGTH) -> str:
    """Generate a random correlation token for subscribe/unsubscribe requests."""
    return "".join(random.choice(string.ascii_letters) for _ in range(length))
