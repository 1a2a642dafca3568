"""Log formatters for the Plumbline logging system.

Classes:
    JSONFormatter: One JSON object per line for log aggregation
    TextFormatter: Human-readable single-line output

Example:
    >>> handler.setFormatter(get_formatter("json"))
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

# Attributes every LogRecord carries; anything else is caller-supplied context.
_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message", "exc_info",
    "exc_text", "stack_info", "taskName",
})


def _extra_fields(record: logging.LogRecord, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    excluded = set(exclude)
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and key not in excluded
    }


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured log output.

    Example:
        {"message": "Table scored", "timestamp": "2024-05-01T10:30:45.123456",
         "level": "INFO", "logger": "plumbline.quality.health",
         "table_name": "orders", "health_score": 65}
    """

    def __init__(
        self,
        *,
        include_location: bool = False,
        exclude_fields: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize JSON formatter.

        Args:
            include_location: Include module, function and line number
            exclude_fields: Extra fields to drop from output
        """
        super().__init__()
        self.include_location = include_location
        self.exclude_fields = set(exclude_fields or [])

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "message": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        if self.include_location:
            log_data["module"] = record.module
            log_data["function"] = record.funcName
            log_data["line"] = record.lineno

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        log_data.update(_extra_fields(record, self.exclude_fields))

        return json.dumps(log_data, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """Human-readable text formatter.

    Example:
        2024-05-01 10:30:45.123 [INFO] plumbline.quality.health: Table scored (table_name=orders, health_score=65)
    """

    def __init__(self, *, include_extras: bool = True) -> None:
        super().__init__()
        self.include_extras = include_extras

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        timestamp = dt.strftime("%Y-%m-%d %H:%M:%S.") + f"{dt.microsecond:06d}"[:3]

        parts = [timestamp, f"[{record.levelname}]", f"{record.name}:", record.getMessage()]

        if self.include_extras:
            extras = [
                f"{key}={value}" if isinstance(value, str) else f"{key}={value!r}"
                for key, value in _extra_fields(record).items()
            ]
            if extras:
                parts.append("(" + ", ".join(extras) + ")")

        formatted = " ".join(parts)

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def get_formatter(format_type: str, **kwargs: Any) -> logging.Formatter:
    """Get formatter instance by type.

    Raises:
        ValueError: If format_type is not supported
    """
    format_type = format_type.lower()

    if format_type == "json":
        return JSONFormatter(**kwargs)
    elif format_type == "text":
        return TextFormatter(**kwargs)
    else:
        raise ValueError(f"Unsupported formatter type: {format_type}")
