"""Exceptions raised by the streaming market-data client."""

from typing import Optional


class StreamingError(Exception):
    """Base class for streaming client errors."""


class StreamingConnectError(StreamingError):
    """Raised when the websocket handshake fails."""

    def __init__(self, message: str, *, url: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class StreamingForbiddenError(StreamingConnectError):
    """Raised when the server rejects the token (HTTP 403)."""


class StreamingUnauthorizedError(StreamingConnectError):
    """Raised when the server did not receive a token (HTTP 401)."""


class SubscriptionValidationError(StreamingError, ValueError):
    """Raised when a subscription request is rejected locally, before any I/O."""


class InvalidDepthError(SubscriptionValidationError):
    """Raised when an order book depth falls outside the allowed range."""


class InvalidInstrumentError(SubscriptionValidationError):
    """Raised when the instrument FIGI is empty."""


class InvalidIntervalError(SubscriptionValidationError):
    """Raised when a candle interval is not one the stream supports."""


class StreamingSendError(StreamingError):
    """Raised when a frame cannot be written to the websocket."""


class StreamingReadError(StreamingError):
    """Raised when the read loop can no longer receive frames."""


class MalformedFrameError(StreamingError):
    """Raised by the frame decoder when a frame is not a valid event."""


class UnknownEventError(StreamingError):
    """Raised by the frame decoder when the event kind is not recognised."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"unknown event kind {kind!r}")
        self.kind = kind
