"""Plumbline exception hierarchy.

This module defines the exception hierarchy for Plumbline operations,
providing structured error handling with context and error codes so that
callers at the API boundary can report failures consistently.

Classes:
    PlumblineException: Base exception for all Plumbline operations
    ConfigurationError: Configuration related errors
    InvalidInputError: Caller supplied input that violates the input contract
    TierNotFoundError: Unknown warehouse size tier name
    AnalysisError: Usage or quality analysis errors
    RecommendationError: Rightsizing recommendation errors

Example:
    >>> try:
    ...     tiers.lookup("Gigantic")
    ... except TierNotFoundError as e:
    ...     logger.warning("Unknown tier", error_code=e.code, context=e.context)
"""

from typing import Any, Dict, Optional


class PlumblineException(Exception):
    """Base exception for all Plumbline operations.

    Attributes:
        code: Unique error code for categorization
        context: Additional context information about the error
        cause: Original exception that caused this error (if any)

    Example:
        >>> raise PlumblineException(
        ...     "Scoring failed",
        ...     code="SCORING_FAILED",
        ...     context={"table": "orders"}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """Initialize Plumbline exception.

        Args:
            message: Human-readable error description
            code: Unique error code for categorization (defaults to class name)
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[Exception] = cause

    def __str__(self) -> str:
        """Return formatted error message with code."""
        return f"{self.code}: {super().__str__()}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={super().__str__()!r}, "
            f"code={self.code!r}, "
            f"context={self.context!r}, "
            f"cause={self.cause!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(super().__str__()),
            "code": self.code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(PlumblineException):
    """Configuration related errors.

    Raised when configuration is invalid, missing, or cannot be loaded.
    """
    pass


class InvalidInputError(PlumblineException):
    """Input contract violations.

    Raised when a caller passes data that the scoring core refuses to
    coerce: a missing tier name, a negative row count, an empty
    connection list, or an unparseable reporting period.
    """
    pass


class TierNotFoundError(InvalidInputError):
    """Unknown warehouse size tier.

    Raised by strict tier lookups. The permissive ``resolve`` path falls
    back to the smallest tier instead.
    """
    pass


class AnalysisError(PlumblineException):
    """Usage or quality analysis errors.

    Base class for failures while aggregating telemetry or scoring tables.
    """
    pass


class RecommendationError(AnalysisError):
    """Rightsizing recommendation errors."""
    pass


class ErrorCodes:
    """Common error codes for Plumbline exceptions."""

    # Configuration errors
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Input errors
    MISSING_TIER_NAME = "MISSING_TIER_NAME"
    TIER_NOT_FOUND = "TIER_NOT_FOUND"
    NEGATIVE_ROW_COUNT = "NEGATIVE_ROW_COUNT"
    INVALID_PERCENTAGE = "INVALID_PERCENTAGE"
    INVALID_PERIOD = "INVALID_PERIOD"
    INVALID_RECORD = "INVALID_RECORD"
    NO_CONNECTIONS = "NO_CONNECTIONS"

    # Analysis errors
    USAGE_AGGREGATION_FAILED = "USAGE_AGGREGATION_FAILED"
    TABLE_SCORING_FAILED = "TABLE_SCORING_FAILED"
    RECOMMENDATION_FAILED = "RECOMMENDATION_FAILED"


def create_error_from_exception(
    exc: Exception,
    message: Optional[str] = None,
    code: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> PlumblineException:
    """Create Plumbline exception from generic exception.

    Args:
        exc: Original exception to convert
        message: Override message (uses original if not provided)
        code: Error code to assign
        context: Additional context information

    Returns:
        Appropriate Plumbline exception type

    Example:
        >>> try:
        ...     int(row["ROW_COUNT"])
        ... except ValueError as e:
        ...     raise create_error_from_exception(
        ...         e,
        ...         code=ErrorCodes.INVALID_RECORD,
        ...         context={"table": "orders"}
        ...     )
    """
    exception_mapping = {
        ValueError: InvalidInputError,
        TypeError: InvalidInputError,
        KeyError: InvalidInputError,
        FileNotFoundError: ConfigurationError,
        ZeroDivisionError: AnalysisError,
    }

    exception_class = exception_mapping.get(type(exc), PlumblineException)

    return exception_class(
        message or str(exc),
        code=code,
        context=context or {},
        cause=exc,
    )
