"""Utility functions for Plumbline operations.

This module provides the small helpers shared by the scoring core and
its boundary adapters: time arithmetic against an injectable clock, key
normalization for loosely typed collaborator rows, score rounding and
presentation formatting.

Functions:
    utc_now: Default wall-clock source
    ensure_utc: Normalize naive datetimes to UTC
    ceil_days_between: Whole days between two instants, rounded up
    mean: Arithmetic mean with an empty default
    round_half_up: Integer rounding with halves going up

Example:
    >>> ceil_days_between(datetime(2024, 1, 1), datetime(2024, 1, 2, 1))
    2
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Union

from .exceptions import InvalidInputError

# Wall-clock source; injected everywhere time matters so tests can pin it.
Clock = Callable[[], datetime]

SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC, which is how the
    warehouse account-usage views report timestamps.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ceil_days_between(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up.

    Args:
        start: First instant
        end: Second instant

    Returns:
        ``ceil(|end - start|)`` in days

    Example:
        >>> ceil_days_between(datetime(2024, 1, 1), datetime(2024, 1, 1, 12))
        1
    """
    delta = abs((ensure_utc(end) - ensure_utc(start)).total_seconds())
    return int(math.ceil(delta / SECONDS_PER_DAY))


class ValidationUtils:
    """Utility class for validation operations."""

    IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

    @classmethod
    def validate_identifier(cls, identifier: str, *, allow_empty: bool = False) -> bool:
        """Validate identifier string.

        Example:
            >>> ValidationUtils.validate_identifier("INFO")
            True
            >>> ValidationUtils.validate_identifier("9lives")
            False
        """
        if not identifier:
            return allow_empty

        return bool(cls.IDENTIFIER_PATTERN.match(identifier))

    @staticmethod
    def require_non_negative(value: Union[int, float], field: str) -> None:
        """Raise InvalidInputError when ``value`` is negative."""
        if value < 0:
            raise InvalidInputError(
                f"{field} must be non-negative, got {value}",
                code="NEGATIVE_VALUE",
                context={"field": field, "value": value},
            )

    @staticmethod
    def require_percentage(value: float, field: str) -> None:
        """Raise InvalidInputError when ``value`` is outside [0, 100]."""
        if not 0 <= value <= 100:
            raise InvalidInputError(
                f"{field} must be within [0, 100], got {value}",
                code="INVALID_PERCENTAGE",
                context={"field": field, "value": value},
            )


class StringUtils:
    """Utility class for string operations."""

    @staticmethod
    def camel_to_snake(text: str) -> str:
        """Convert camelCase to snake_case.

        Example:
            >>> StringUtils.camel_to_snake("lastAlteredAt")
            'last_altered_at'
        """
        return re.sub(r"(?<!^)(?=[A-Z])", "_", text).lower()

    @classmethod
    def normalize_key(cls, key: str) -> str:
        """Normalize a collaborator column name to snake_case.

        Query engines hand back ``ROW_COUNT`` while JSON clients send
        ``rowCount``; both become ``row_count``.

        Example:
            >>> StringUtils.normalize_key("ROW_COUNT")
            'row_count'
            >>> StringUtils.normalize_key("rowCount")
            'row_count'
        """
        key = key.strip()
        if key.isupper() or "_" in key:
            return key.lower()
        return cls.camel_to_snake(key)


class DictUtils:
    """Utility class for dictionary operations."""

    @staticmethod
    def normalize_keys(row: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``row`` with snake_case keys.

        Later keys win when two spellings collapse onto the same name.
        """
        return {StringUtils.normalize_key(str(k)): v for k, v in row.items()}

    @staticmethod
    def pick(row: Dict[str, Any], *keys: str, default: Any = None) -> Any:
        """Return the first present, non-None value among ``keys``."""
        for key in keys:
            value = row.get(key)
            if value is not None:
                return value
        return default


class FormatUtils:
    """Utility class for presentation formatting."""

    @staticmethod
    def round_currency(value: float) -> float:
        """Round a USD amount to cents for presentation."""
        return round(value, 2)

    @staticmethod
    def format_duration(seconds: Union[int, float]) -> str:
        """Format duration into a short human-readable string.

        Example:
            >>> FormatUtils.format_duration(0.25)
            '250.00ms'
            >>> FormatUtils.format_duration(3661)
            '1h 1m 1s'
        """
        if seconds == 0:
            return "0s"

        abs_seconds = abs(seconds)
        sign = "-" if seconds < 0 else ""

        if abs_seconds < 1:
            return f"{sign}{abs_seconds * 1000:.2f}ms"

        hours = int(abs_seconds // 3600)
        minutes = int((abs_seconds % 3600) // 60)
        secs = abs_seconds % 60

        parts = []
        if hours > 0:
            parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
        if secs > 0 or not parts:
            parts.append(f"{int(secs)}s" if secs == int(secs) else f"{secs:.2f}s")

        return sign + " ".join(parts)


def mean(values: Iterable[float], *, default: float = 0.0) -> float:
    """Arithmetic mean, or ``default`` for an empty iterable."""
    items = list(values)
    if not items:
        return default
    return sum(items) / len(items)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up.

    Example:
        >>> round_half_up(82.5)
        83
        >>> round(82.5)
        82
    """
    return int(math.floor(value + 0.5))
