"""Plumbline core infrastructure.

This package provides the foundational pieces shared by the sizing and
quality engines: the exception hierarchy, collaborator protocols and
utilities.

Modules:
    exceptions: Exception hierarchy
    protocols: Collaborator protocols
    utils: Utility functions

Example:
    >>> from plumbline.core import InvalidInputError, ceil_days_between
"""

from .exceptions import (
    AnalysisError,
    ConfigurationError,
    ErrorCodes,
    InvalidInputError,
    PlumblineException,
    RecommendationError,
    TierNotFoundError,
    create_error_from_exception,
)
from .protocols import (
    ColumnMetadataSource,
    CreditMeteringSource,
    QueryTelemetrySource,
    TableMetadataSource,
)
from .utils import (
    Clock,
    DictUtils,
    FormatUtils,
    StringUtils,
    ValidationUtils,
    ceil_days_between,
    ensure_utc,
    mean,
    round_half_up,
    utc_now,
)

__all__ = [
    # Exceptions
    "PlumblineException",
    "ConfigurationError",
    "InvalidInputError",
    "TierNotFoundError",
    "AnalysisError",
    "RecommendationError",
    "ErrorCodes",
    "create_error_from_exception",

    # Protocols
    "QueryTelemetrySource",
    "CreditMeteringSource",
    "TableMetadataSource",
    "ColumnMetadataSource",

    # Utilities
    "Clock",
    "DictUtils",
    "FormatUtils",
    "StringUtils",
    "ValidationUtils",
    "ceil_days_between",
    "ensure_utc",
    "mean",
    "round_half_up",
    "utc_now",
]
