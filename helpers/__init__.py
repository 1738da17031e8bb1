"""
Helper modules for invest-openapi-sdk.
"""

from .unified_logger import get_logger, get_streaming_logger

__all__ = [
    'get_logger',
    'get_streaming_logger',
]
