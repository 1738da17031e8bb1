"""
Unified logging for invest-openapi-sdk

Provides consistent, colored, and informative logging across all components:
- Streaming connection and dispatcher
- Example scripts

Based on loguru with component-specific context.
"""

import os
import sys
from typing import Any, Dict, Optional

from loguru import logger as _logger


class UnifiedLogger:
    """
    Unified logger that provides consistent formatting across all components.

    Features:
    - Colored console output with source location (module:function:line)
    - Component-specific context (streaming client, figi, etc.)
    - Optional file logging with rotation and compression
    - ``.log(message, level)`` method used by the streaming components
    """

    def __init__(
        self,
        component_type: str,  # "streaming", "script", "core"
        component_name: str,  # "invest_openapi", "stream_example", etc.
        context: Optional[Dict[str, Any]] = None,  # Additional context like figi
        log_to_console: bool = True,
        log_level: str = "INFO",
        log_file: Optional[str] = None,
    ):
        """
        Initialize unified logger.

        Args:
            component_type: Type of component (streaming, script, core)
            component_name: Name of specific component
            context: Additional context (figi, request_id, etc.)
            log_to_console: Whether to log to console
            log_level: Minimum log level
            log_file: Optional path of a rotating log file
        """
        self.component_type = component_type.upper()
        self.component_name = component_name.upper()
        self.context = context or {}
        self.log_level = log_level.upper()
        self.log_file = log_file

        self.component_id = f"{self.component_type}:{self.component_name}"
        if self.context:
            context_str = ":".join([f"{k}={v}" for k, v in self.context.items()])
            self.component_id = f"{self.component_id}:{context_str}"

        self._setup_logger(log_to_console)

    def _setup_logger(self, log_to_console: bool):
        """Setup loguru sinks once per process and bind component context."""

        if log_to_console and not hasattr(_logger, '_invest_console_setup'):
            # Replace loguru's default stderr handler with the shared console sink
            _logger.remove()

            def format_record(record):
                module_name = record.get("module") or record.get("name", "")
                function_name = record.get("function", "")
                line_number = record.get("line", 0)
                source_location = f"{module_name}:{function_name}:{line_number}"
                record["extra"]["short_name"] = f"{source_location:>40}"
                return True

            console_format = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[short_name]}</cyan> | "
                "<level>{message}</level>"
            )

            _logger.add(
                sys.stdout,
                format=console_format,
                level=self.log_level,
                colorize=True,
                filter=lambda record: record["extra"].get("component_id") and format_record(record),
                backtrace=True,
                diagnose=False,
            )
            _logger._invest_console_setup = True

        if self.log_file and not hasattr(_logger, '_invest_file_setup'):
            def ensure_component(record):
                if "component_id" not in record["extra"]:
                    record["extra"]["component_id"] = "UNKNOWN"
                return True

            file_format = (
                "{time:YYYY-MM-DD HH:mm:ss} | "
                "{level:<8} | "
                "{extra[component_id]:<35} | "
                "{message}"
            )

            _logger.add(
                str(self.log_file),
                format=file_format,
                level="DEBUG",
                filter=ensure_component,
                rotation="10 MB",
                retention=5,
                compression="zip",
                backtrace=False,
                diagnose=False,
                enqueue=True,  # Thread-safe writes
                catch=True,
            )
            _logger._invest_file_setup = True

        self._logger = _logger.bind(component_id=self.component_id)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._logger.opt(depth=1).debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._logger.opt(depth=1).info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._logger.opt(depth=1).warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._logger.opt(depth=1).error(message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._logger.opt(depth=1).critical(message, **kwargs)

    def log(self, message: str, level: str = "INFO", **kwargs):
        """
        Log at a level given by name.

        Args:
            message: Log message
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            **kwargs: Additional context
        """
        level = level.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            level = "INFO"
        # depth=2 skips this method and the component's _log helper
        self._logger.opt(depth=2).log(level, message, **kwargs)


def get_logger(
    component_type: str,
    component_name: str,
    context: Optional[Dict[str, Any]] = None,
    log_to_console: bool = True,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> UnifiedLogger:
    """
    Factory function to create unified loggers.

    Args:
        component_type: Type of component (streaming, script, core)
        component_name: Name of specific component
        context: Additional context
        log_to_console: Whether to log to console
        log_level: Log level (defaults to env LOG_LEVEL or INFO)
        log_file: Log file path (defaults to env LOG_FILE, unset disables file logging)

    Examples:
        logger = get_logger("streaming", "invest_openapi")
        logger = get_logger("script", "stream_example", {"figi": "BBG005DXJS36"})
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')
    if log_file is None:
        log_file = os.getenv('LOG_FILE') or None

    return UnifiedLogger(
        component_type=component_type,
        component_name=component_name,
        context=context,
        log_to_console=log_to_console,
        log_level=log_level,
        log_file=log_file,
    )


def get_streaming_logger(client_name: str = "invest_openapi", **context) -> UnifiedLogger:
    """Get logger for streaming clients."""
    return get_logger("streaming", client_name, context)
