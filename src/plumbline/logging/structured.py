"""Structured logging for Plumbline.

This module wraps structlog with a thread-local context so every log line
emitted while scoring a table or sizing a warehouse carries the same
correlation id and subject fields.

Classes:
    LogContext: Thread-local context storage
    ContextFilter: Filter copying context onto stdlib log records
    StructuredLogger: Main structured logging interface

Example:
    >>> logger = StructuredLogger("plumbline.quality.health")
    >>> with logger.context(table_name="orders"):
    ...     logger.info("Table scored", health_score=65)
"""

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

import structlog

from ..core.exceptions import ConfigurationError
from ..core.utils import ValidationUtils


def _resolve_level(level: str) -> int:
    """Map a level name onto its stdlib number.

    Raises:
        ConfigurationError: If ``level`` is malformed or unknown
    """
    if not ValidationUtils.validate_identifier(level):
        raise ConfigurationError(f"Invalid log level: {level}", code="INVALID_LOG_LEVEL")

    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown log level: {level}", code="UNKNOWN_LOG_LEVEL")
    return numeric


class LogContext:
    """Per-thread key/value context shared by one logger's calls.

    Example:
        >>> context = LogContext()
        >>> context.set("warehouse", "ANALYTICS_WH")
        >>> context.get_all()
        {'warehouse': 'ANALYTICS_WH'}
    """

    def __init__(self) -> None:
        self._local = threading.local()

    @property
    def _values(self) -> Dict[str, Any]:
        values = getattr(self._local, "values", None)
        if values is None:
            values = self._local.values = {}
        return values

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        return dict(self._values)

    def update(self, context: Dict[str, Any]) -> None:
        self._values.update(context)

    def replace(self, context: Dict[str, Any]) -> None:
        self._local.values = dict(context)

    def clear(self) -> None:
        self.replace({})


class ContextFilter(logging.Filter):
    """Copy the logger context onto stdlib records passing through.

    Attributes a record already has are left alone; ``correlation_id``
    falls back to ``"unknown"``.
    """

    def __init__(self, context: LogContext) -> None:
        super().__init__()
        self._context = context

    def filter(self, record: logging.LogRecord) -> bool:
        defaults = {"correlation_id": "unknown"}
        defaults.update(self._context.get_all())
        defaults["timestamp_iso"] = datetime.fromtimestamp(record.created).isoformat()

        for key, value in defaults.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class StructuredLogger:
    """structlog logger carrying a thread-local context and a correlation id.

    Attributes:
        name: Logger name

    Example:
        >>> logger = StructuredLogger("plumbline.sizing.advisor")
        >>> logger.bind(warehouse="ETL_WH").info("Downsize recommended", savings_usd=75.0)
    """

    def __init__(
        self,
        name: str,
        *,
        level: str = "INFO",
        enable_correlation: bool = True,
        auto_correlation: bool = True,
    ) -> None:
        """Create the logger and attach a context filter to its stdlib twin.

        Args:
            name: Dotted logger name
            level: Initial level; unrecognized names fall back to INFO
            enable_correlation: Attach a correlation id to every event
            auto_correlation: Generate the correlation id immediately
                (and again after :meth:`clear_context`)
        """
        self.name = name
        self._enable_correlation = enable_correlation
        self._auto_correlation = auto_correlation
        self._context = LogContext()
        self._logger = structlog.get_logger(name)

        self._stdlib_logger = logging.getLogger(name)
        initial = logging.getLevelName(level.upper())
        self._stdlib_logger.setLevel(initial if isinstance(initial, int) else logging.INFO)
        self._stdlib_logger.addFilter(ContextFilter(self._context))

        if enable_correlation and auto_correlation:
            self._ensure_correlation_id()

    def _ensure_correlation_id(self) -> str:
        if not self._context.get("correlation_id"):
            self._context.set("correlation_id", str(uuid.uuid4()))
        return self._context.get("correlation_id")

    def _emit(self, method: str, message: str, fields: Dict[str, Any], **extra: Any) -> None:
        event = self._context.get_all()
        if self._enable_correlation:
            event["correlation_id"] = self._ensure_correlation_id()
        else:
            event.pop("correlation_id", None)
        event["timestamp"] = time.time()
        event.update(fields)
        getattr(self._logger, method)(message, **extra, **event)

    @contextmanager
    def context(self, **context_data: Any) -> Iterator[None]:
        """Add ``context_data`` to every event logged inside the block.

        Example:
            >>> with logger.context(table_name="orders", run="nightly"):
            ...     logger.info("Scoring started")
        """
        saved = self._context.get_all()
        self._context.update(context_data)
        try:
            yield
        finally:
            self._context.replace(saved)

    def bind(self, **context_data: Any) -> "StructuredLogger":
        """Copy of this logger whose context also holds ``context_data``."""
        child = StructuredLogger(
            self.name,
            level=self.get_level(),
            enable_correlation=self._enable_correlation,
            auto_correlation=False,
        )
        child._context.replace({**self._context.get_all(), **context_data})
        return child

    def set_level(self, level: str) -> None:
        self._stdlib_logger.setLevel(_resolve_level(level))

    def get_level(self) -> str:
        return logging.getLevelName(self._stdlib_logger.getEffectiveLevel())

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("debug", message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("info", message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("warning", message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("error", message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._emit("critical", message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._emit("error", message, kwargs, exc_info=True)

    def set_correlation_id(self, correlation_id: str) -> None:
        if self._enable_correlation:
            self._context.set("correlation_id", correlation_id)

    def get_correlation_id(self) -> Optional[str]:
        return self._context.get("correlation_id") if self._enable_correlation else None

    def get_context(self) -> Dict[str, Any]:
        return self._context.get_all()

    def clear_context(self) -> None:
        """Drop all context; a fresh correlation id is issued when auto-correlation is on."""
        self._context.clear()
        if self._enable_correlation and self._auto_correlation:
            self._ensure_correlation_id()

    def __repr__(self) -> str:
        return f"StructuredLogger(name={self.name!r}, level={self.get_level()!r}, correlation={self._enable_correlation})"
