"""
Message parsing and routing for the market-data stream.

Decodes the event envelope, picks the typed model for the event kind, and
reports frames that cannot be delivered.
"""

from typing import Any, Optional, Union

from pydantic import ValidationError

from .exceptions import MalformedFrameError, UnknownEventError
from .models import EVENT_MODELS, Event, EventEnvelope


class StreamMessageHandler:
    """Turns raw text frames into typed events."""

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize message handler.

        Args:
            logger: Logger instance
        """
        self.logger = logger

    def set_logger(self, logger):
        """Set the logger instance."""
        self.logger = logger

    def _log(self, message: str, level: str = "INFO"):
        """Log message using the logger if available."""
        if self.logger:
            if hasattr(self.logger, 'log'):
                self.logger.log(message, level)
            elif level == "ERROR" and hasattr(self.logger, 'error'):
                self.logger.error(message)
            elif level == "WARNING" and hasattr(self.logger, 'warning'):
                self.logger.warning(message)
            elif level == "DEBUG" and hasattr(self.logger, 'debug'):
                self.logger.debug(message)
            elif hasattr(self.logger, 'info'):
                self.logger.info(message)

    def decode(self, raw_message: Union[str, bytes]) -> Event:
        """
        Decode a frame into its typed event.

        Raises:
            MalformedFrameError: Frame is not JSON, has no kind, or the payload
                does not match the model for its kind
            UnknownEventError: Kind is not one of the supported events
        """
        try:
            envelope = EventEnvelope.model_validate_json(raw_message)
        except ValidationError as exc:
            raise MalformedFrameError(f"can't decode event envelope: {exc}") from exc

        model = EVENT_MODELS.get(envelope.kind)
        if model is None:
            raise UnknownEventError(envelope.kind)

        try:
            return model.model_validate_json(raw_message)
        except ValidationError as exc:
            raise MalformedFrameError(f"can't decode {envelope.kind} event: {exc}") from exc

    def process_message(self, raw_message: Union[str, bytes]) -> Optional[Event]:
        """
        Decode a frame, logging and dropping anything that can't be delivered.

        Returns:
            The typed event, or None when the frame was dropped
        """
        try:
            return self.decode(raw_message)
        except UnknownEventError as exc:
            self._log(f"[STREAMING] Got unknown event {exc.kind!r}: {raw_message!r}", "WARNING")
        except MalformedFrameError as exc:
            self._log(f"[STREAMING] Dropping malformed frame {raw_message!r}: {exc}", "WARNING")
        return None
