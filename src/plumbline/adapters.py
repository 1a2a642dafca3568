"""Boundary adapters from collaborator rows to Plumbline records.

Collaborators return loosely typed mappings whose keys follow whatever
convention the source uses: the warehouse's account-usage views return
``WAREHOUSE_NAME`` and ``ROW_COUNT``, JSON clients send ``rowCount``.
The adapters below are the only place where those spellings are
normalized; the scoring core only ever sees canonical records.

Functions:
    query_record_from_row: Row -> QueryRecord
    credit_record_from_row: Row -> CreditMeteringRecord
    column_stat_from_row: Row -> ColumnStat
    table_metadata_from_row: Row (+ column rows) -> TableMetadata
    usage_window_from_row: Pre-aggregated row -> UsageWindow

Example:
    >>> record = query_record_from_row(
    ...     {"WAREHOUSE_NAME": "ETL_WH", "EXECUTION_TIME": 91000, "START_TIME": "2024-05-01T10:00:00"}
    ... )
    >>> record.execution_time_ms
    91000.0
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .core.exceptions import ErrorCodes, InvalidInputError, PlumblineException, create_error_from_exception
from .core.utils import DictUtils
from .quality.models import ColumnStat, TableMetadata
from .sizing.usage import CreditMeteringRecord, QueryRecord, UsageWindow

_RESOURCE_KEYS = ("resource_name", "warehouse_name", "warehouse", "name")


def _required(row: Dict[str, Any], *keys: str) -> Any:
    value = DictUtils.pick(row, *keys)
    if value is None:
        raise InvalidInputError(
            f"Row is missing required field {keys[0]!r}",
            code=ErrorCodes.INVALID_RECORD,
            context={"expected": list(keys), "present": sorted(row)},
        )
    return value


def _to_datetime(value: Union[str, datetime, date]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _to_date(value: Union[str, datetime, date]) -> Union[date, datetime]:
    if isinstance(value, (datetime, date)):
        return value
    text = str(value).strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return _to_datetime(text)


def _convert(kind: str, row: Mapping[str, Any], build: Any) -> Any:
    normalized = DictUtils.normalize_keys(dict(row))
    try:
        return build(normalized)
    except PlumblineException:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise create_error_from_exception(
            e,
            message=f"Invalid {kind} row: {e}",
            code=ErrorCodes.INVALID_RECORD,
            context={"kind": kind},
        ) from e


def query_record_from_row(row: Mapping[str, Any]) -> QueryRecord:
    return _convert("query", row, lambda r: QueryRecord(
        resource_name=str(_required(r, *_RESOURCE_KEYS)),
        execution_time_ms=float(_required(r, "execution_time_ms", "execution_time", "total_elapsed_time")),
        start_time=_to_datetime(_required(r, "start_time")),
    ))


def credit_record_from_row(row: Mapping[str, Any]) -> CreditMeteringRecord:
    return _convert("credit metering", row, lambda r: CreditMeteringRecord(
        resource_name=str(_required(r, *_RESOURCE_KEYS)),
        date=_to_date(_required(r, "date", "usage_date", "start_time")),
        credits_used=float(_required(r, "credits_used")),
    ))


def column_stat_from_row(row: Mapping[str, Any]) -> ColumnStat:
    return _convert("column", row, lambda r: ColumnStat(
        column_name=str(_required(r, "column_name", "name")),
        null_percentage=float(DictUtils.pick(r, "null_percentage", default=0.0)),
        distinct_count=int(DictUtils.pick(r, "distinct_count", default=0)),
    ))


def table_metadata_from_row(
    row: Mapping[str, Any],
    columns: Optional[Iterable[Mapping[str, Any]]] = None,
) -> TableMetadata:
    """Build table metadata; column rows are converted with :func:`column_stat_from_row`."""
    stats: List[ColumnStat] = [column_stat_from_row(c) for c in columns or ()]

    def build(r: Dict[str, Any]) -> TableMetadata:
        duplicates = DictUtils.pick(r, "duplicate_row_count", "duplicate_count")
        return TableMetadata(
            table_name=str(_required(r, "table_name", "name")),
            row_count=int(_required(r, "row_count")),
            created_at=_to_datetime(_required(r, "created_at", "created")),
            last_altered_at=_to_datetime(_required(r, "last_altered_at", "last_altered")),
            columns=stats,
            duplicate_row_count=int(duplicates) if duplicates is not None else None,
        )

    return _convert("table", row, build)


def usage_window_from_row(row: Mapping[str, Any], *, period_days: int) -> UsageWindow:
    """Build a usage window from a row the source already aggregated."""
    def build(r: Dict[str, Any]) -> UsageWindow:
        query_count = int(_required(r, "query_count"))
        avg_seconds = float(DictUtils.pick(r, "avg_execution_time_seconds", "avg_execution_time", default=0.0))
        total_seconds = DictUtils.pick(r, "total_execution_time_seconds", "total_execution_time")
        return UsageWindow(
            resource_name=str(_required(r, *_RESOURCE_KEYS)),
            period_days=period_days,
            query_count=query_count,
            avg_execution_time_seconds=avg_seconds,
            total_execution_time_seconds=(
                float(total_seconds) if total_seconds is not None else avg_seconds * query_count
            ),
            credits_used=float(DictUtils.pick(r, "credits_used", default=0.0)),
        )

    return _convert("usage", row, build)
