"""Collaborator protocols for Plumbline.

The scoring core performs no I/O. Everything it consumes is fetched by
collaborators that implement the protocols below, and every collaborator
is passed explicitly to the function that needs it.

Classes:
    QueryTelemetrySource: Per-query execution records
    CreditMeteringSource: Daily credit consumption per warehouse
    TableMetadataSource: Table volume and freshness metadata
    ColumnMetadataSource: Per-column null and distinct statistics

Example:
    >>> def recommendations(telemetry: QueryTelemetrySource) -> list:
    ...     records = telemetry.fetch_query_records(period_days=30)
    ...     return aggregator.aggregate(records)
"""

from typing import Any, Iterable, List, Mapping, Protocol, runtime_checkable


@runtime_checkable
class QueryTelemetrySource(Protocol):
    """Source of raw query-execution records.

    Rows carry ``resource_name``, ``execution_time_ms`` and ``start_time``
    in any key casing; see :mod:`plumbline.adapters`.
    """

    def fetch_query_records(self, *, period_days: int) -> Iterable[Mapping[str, Any]]:
        """Return query records started within the last ``period_days``."""
        ...


@runtime_checkable
class CreditMeteringSource(Protocol):
    """Source of the warehouse credit-metering series."""

    def fetch_credit_usage(self, *, period_days: int) -> Iterable[Mapping[str, Any]]:
        """Return ``{resource_name, date, credits_used}`` rows."""
        ...


@runtime_checkable
class TableMetadataSource(Protocol):
    """Source of table-level metadata."""

    def list_tables(self) -> List[Mapping[str, Any]]:
        """Return ``{table_name, row_count, created_at, last_altered_at}`` rows."""
        ...


@runtime_checkable
class ColumnMetadataSource(Protocol):
    """Source of per-column statistics for one table."""

    def column_stats(self, table_name: str) -> List[Mapping[str, Any]]:
        """Return ``{column_name, null_percentage, distinct_count}`` rows."""
        ...
