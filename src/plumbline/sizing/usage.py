# src/plumbline/sizing/usage.py
"""Warehouse usage aggregation.

Rolls per-query execution records and the daily credit-metering series up
into one usage window per warehouse, and into the per-day series shown on
the performance dashboard.
"""

import re
from collections import OrderedDict
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..core.exceptions import AnalysisError, ErrorCodes, InvalidInputError, PlumblineException
from ..core.utils import Clock, ValidationUtils, ensure_utc, mean, utc_now
from ..logging import get_logger

DEFAULT_PERIOD_DAYS = 30

_PERIOD_PATTERN = re.compile(r"^\s*(\d+)\s*(d|day|days)?\s*$", re.IGNORECASE)


@dataclass
class QueryRecord:
    """One executed query."""
    resource_name: str
    execution_time_ms: float
    start_time: datetime

    def __post_init__(self):
        ValidationUtils.require_non_negative(self.execution_time_ms, "execution_time_ms")


@dataclass
class CreditMeteringRecord:
    """Credits billed to one warehouse for one day (or metering interval)."""
    resource_name: str
    date: Union[date, datetime]
    credits_used: float

    def __post_init__(self):
        ValidationUtils.require_non_negative(self.credits_used, "credits_used")


@dataclass
class UsageWindow:
    """Usage of one warehouse over the trailing ``period_days``."""
    resource_name: str
    period_days: int
    query_count: int
    avg_execution_time_seconds: float
    total_execution_time_seconds: float
    credits_used: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailyUsage:
    """One day of a warehouse's usage series."""
    date: date
    query_count: int
    avg_execution_time_seconds: float
    total_execution_time_seconds: float
    credits_used: float
    cost_usd: float

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["cost_usd"] = round(self.cost_usd, 2)
        return data


def parse_period(value: Union[str, int, None], *, default: int = DEFAULT_PERIOD_DAYS) -> int:
    """Parse a usage period such as ``"30days"``, ``"7d"`` or ``30``.

    Raises:
        InvalidInputError: If the value is not a positive number of days
    """
    if value is None or value == "":
        return default

    days: Optional[int] = None
    if isinstance(value, bool):
        days = None
    elif isinstance(value, int):
        days = value
    elif isinstance(value, str):
        match = _PERIOD_PATTERN.match(value)
        if match:
            days = int(match.group(1))

    if days is None or days <= 0:
        raise InvalidInputError(
            f"Invalid usage period: {value!r}",
            code=ErrorCodes.INVALID_PERIOD,
            context={"value": value},
        )
    return days


def _in_window(moment: Union[date, datetime], start: datetime, end: datetime) -> bool:
    """Whether ``moment`` falls inside ``[start, end]``; dates compare by day."""
    if isinstance(moment, datetime):
        return start <= ensure_utc(moment) <= end
    return start.date() <= moment <= end.date()


def _day_of(moment: Union[date, datetime]) -> date:
    if isinstance(moment, datetime):
        return ensure_utc(moment).date()
    return moment


class UsageAggregator:
    """Aggregates query telemetry into per-warehouse usage windows.

    Example:
        >>> aggregator = UsageAggregator(clock=lambda: now)
        >>> windows = aggregator.aggregate(records, credits, period_days=30)
        >>> windows[0].query_count
        40
    """

    def __init__(
        self,
        *,
        clock: Clock = utc_now,
        default_period_days: int = DEFAULT_PERIOD_DAYS,
    ) -> None:
        self.clock = clock
        self.default_period_days = default_period_days
        self.logger = get_logger("sizing.usage")

    def _window(self, period_days: Optional[int], now: Optional[datetime]) -> Tuple[int, datetime, datetime]:
        days = parse_period(period_days, default=self.default_period_days)
        current = ensure_utc(now) if now is not None else ensure_utc(self.clock())
        return days, current - timedelta(days=days), current

    def aggregate(
        self,
        records: Iterable[QueryRecord],
        credits: Optional[Iterable[CreditMeteringRecord]] = None,
        *,
        period_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[UsageWindow]:
        """Build one usage window per warehouse with queries in the period.

        Warehouses appear in the order they first appear in ``records``.
        Without a metering series ``credits_used`` is 0 and the advisor
        prices the warehouse from execution time instead.

        Raises:
            InvalidInputError: If the period is invalid
            AnalysisError: If a record cannot be aggregated
        """
        days, start, end = self._window(period_days, now)

        try:
            durations: "OrderedDict[str, List[float]]" = OrderedDict()
            for record in records:
                if not _in_window(record.start_time, start, end):
                    continue
                durations.setdefault(record.resource_name, []).append(float(record.execution_time_ms))

            credit_totals: Dict[str, float] = {}
            for row in credits or ():
                if _in_window(row.date, start, end):
                    credit_totals[row.resource_name] = credit_totals.get(row.resource_name, 0.0) + row.credits_used

            windows = [
                UsageWindow(
                    resource_name=name,
                    period_days=days,
                    query_count=len(times),
                    avg_execution_time_seconds=mean(times) / 1000,
                    total_execution_time_seconds=sum(times) / 1000,
                    credits_used=credit_totals.get(name, 0.0),
                )
                for name, times in durations.items()
            ]
        except PlumblineException:
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise AnalysisError(
                "Failed to aggregate query records",
                code=ErrorCodes.USAGE_AGGREGATION_FAILED,
                context={"period_days": days},
                cause=e,
            ) from e

        self.logger.debug("Usage aggregated", period_days=days, warehouse_count=len(windows))
        return windows

    def aggregate_resource(
        self,
        resource_name: str,
        records: Iterable[QueryRecord],
        credits: Optional[Iterable[CreditMeteringRecord]] = None,
        *,
        period_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Optional[UsageWindow]:
        """Usage window of a single warehouse, or None when it has no queries."""
        windows = self.aggregate(
            (r for r in records if r.resource_name == resource_name),
            (c for c in credits or () if c.resource_name == resource_name),
            period_days=period_days,
            now=now,
        )
        return windows[0] if windows else None

    def daily_breakdown(
        self,
        resource_name: str,
        records: Iterable[QueryRecord],
        credits: Optional[Iterable[CreditMeteringRecord]] = None,
        *,
        period_days: Optional[int] = None,
        now: Optional[datetime] = None,
        credit_unit_price: float = 3.0,
    ) -> List[DailyUsage]:
        """Per-day usage series of one warehouse, ordered by date.

        Days with neither queries nor credits are left out.
        """
        _, start, end = self._window(period_days, now)

        durations: Dict[date, List[float]] = {}
        for record in records:
            if record.resource_name != resource_name or not _in_window(record.start_time, start, end):
                continue
            durations.setdefault(_day_of(record.start_time), []).append(float(record.execution_time_ms))

        day_credits: Dict[date, float] = {}
        for row in credits or ():
            if row.resource_name == resource_name and _in_window(row.date, start, end):
                day = _day_of(row.date)
                day_credits[day] = day_credits.get(day, 0.0) + row.credits_used

        series = []
        for day in sorted(set(durations) | set(day_credits)):
            times = durations.get(day, [])
            used = day_credits.get(day, 0.0)
            series.append(DailyUsage(
                date=day,
                query_count=len(times),
                avg_execution_time_seconds=mean(times) / 1000,
                total_execution_time_seconds=sum(times) / 1000,
                credits_used=used,
                cost_usd=used * credit_unit_price,
            ))
        return series
