"""Plumbline structured logging.

Example:
    >>> from plumbline.logging import get_logger, PerformanceLogger
    >>> logger = get_logger(__name__)
    >>> logger.info("Scoring started", table_count=10)
"""

from .factory import (
    LoggerConfig,
    LoggerFactory,
    configure_logging,
    get_factory,
    get_logger,
    get_performance_logger,
    shutdown_logging,
)
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .handlers import ConsoleHandler, RotatingFileHandler
from .performance import PerformanceLogger, PerformanceMetrics, TimingContext, TimingMetrics
from .structured import ContextFilter, LogContext, StructuredLogger

__all__ = [
    # Factory and configuration
    "LoggerConfig",
    "LoggerFactory",
    "configure_logging",
    "get_factory",
    "get_logger",
    "get_performance_logger",
    "shutdown_logging",

    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",

    # Handlers
    "ConsoleHandler",
    "RotatingFileHandler",

    # Performance logging
    "PerformanceLogger",
    "PerformanceMetrics",
    "TimingContext",
    "TimingMetrics",

    # Structured logging
    "ContextFilter",
    "LogContext",
    "StructuredLogger",
]
