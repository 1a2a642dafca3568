"""Performance logging for Plumbline operations.

Tracks how long the engine spends on fleet-wide passes (scoring every
sampled table, ranking every warehouse) and keeps running statistics per
operation name.

Classes:
    TimingMetrics: A single timing measurement
    PerformanceMetrics: Aggregated statistics for one operation
    TimingContext: Context manager for operation timing
    PerformanceLogger: Main performance logging interface

Example:
    >>> perf_logger = PerformanceLogger("quality.fleet")
    >>> with perf_logger.measure("score_tables", table_count=12) as timer:
    ...     reports = aggregator.evaluate(tables, scorer)
    >>> timer.duration_ms
    4.2
"""

import statistics
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .structured import StructuredLogger
from ..core.utils import FormatUtils


@dataclass
class TimingMetrics:
    """One measured run of an operation.

    ``start_time`` and ``end_time`` are ``time.perf_counter`` readings;
    ``duration`` is in seconds and stays None until :meth:`complete`.
    """
    operation: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time
        self.success, self.error = success, error

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    @property
    def duration_ms(self) -> Optional[float]:
        if self.duration is None:
            return None
        return self.duration * 1000


@dataclass
class PerformanceMetrics:
    """Running statistics for every completed run of one operation."""
    operation: str
    failed_calls: int = 0
    errors: List[str] = field(default_factory=list)
    durations: List[float] = field(default_factory=list, repr=False)

    def add_timing(self, timing: TimingMetrics) -> None:
        """Record a completed timing; runs still in flight are skipped."""
        if timing.duration is None or not timing.is_complete:
            return

        self.durations.append(timing.duration)
        if not timing.success:
            self.failed_calls += 1
            if timing.error:
                self.errors.append(timing.error)

    @property
    def total_calls(self) -> int:
        return len(self.durations)

    @property
    def successful_calls(self) -> int:
        return self.total_calls - self.failed_calls

    @property
    def total_duration(self) -> float:
        return sum(self.durations)

    @property
    def min_duration(self) -> Optional[float]:
        return min(self.durations) if self.durations else None

    @property
    def max_duration(self) -> Optional[float]:
        return max(self.durations) if self.durations else None

    @property
    def avg_duration(self) -> Optional[float]:
        return statistics.mean(self.durations) if self.durations else None

    @property
    def median_duration(self) -> Optional[float]:
        return statistics.median(self.durations) if self.durations else None

    @property
    def success_rate(self) -> float:
        """Share of successful runs in percent; 0 before the first run."""
        if not self.durations:
            return 0.0
        return self.successful_calls * 100 / self.total_calls

    def to_dict(self) -> Dict[str, Any]:
        stats = {
            name: getattr(self, name)
            for name in (
                "operation", "total_calls", "successful_calls", "failed_calls",
                "success_rate", "total_duration", "min_duration", "max_duration",
                "avg_duration", "median_duration",
            )
        }
        stats["error_count"] = len(self.errors)
        return stats


class TimingContext:
    """Time the enclosed block, optionally logging start and outcome.

    Exceptions raised inside the block are recorded on the timing and
    re-raised unchanged.

    Example:
        >>> with TimingContext("rank_warehouses") as timer:
        ...     ranked = advisor.rank(estimates)
        >>> timer.duration_ms
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[StructuredLogger] = None,
        metadata: Optional[Dict[str, Any]] = None,
        auto_log: bool = True,
    ) -> None:
        self.operation = operation
        self.logger = logger if auto_log else None
        self.metadata = dict(metadata or {})
        self.timing: Optional[TimingMetrics] = None

    @property
    def duration(self) -> Optional[float]:
        return None if self.timing is None else self.timing.duration

    @property
    def duration_ms(self) -> Optional[float]:
        return None if self.timing is None else self.timing.duration_ms

    def __enter__(self) -> "TimingContext":
        if self.logger:
            self.logger.debug("Operation started", operation=self.operation, **self.metadata)
        self.timing = TimingMetrics(self.operation, time.perf_counter(), metadata=self.metadata)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        error = str(exc_val) if exc_val else None
        self.timing.complete(success=exc_type is None, error=error)

        if not self.logger:
            return
        fields = dict(self.metadata, operation=self.operation, duration_ms=self.timing.duration_ms)
        if self.timing.success:
            self.logger.info("Operation completed", **fields)
        else:
            self.logger.error("Operation failed", error=error, **fields)


class PerformanceLogger:
    """Performance logger keeping per-operation timing statistics.

    Example:
        >>> perf_logger = PerformanceLogger("sizing.fleet")
        >>> with perf_logger.measure("recommend_fleet"):
        ...     advisor.recommend_fleet(pairs)
        >>> perf_logger.get_summary()["total_calls"]
        1
    """

    def __init__(
        self,
        name: str,
        *,
        auto_log: bool = True,
        track_metrics: bool = True,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self.name = name
        self.auto_log = auto_log
        self.track_metrics = track_metrics
        self.logger = logger or StructuredLogger(f"perf.{name}")
        self._metrics: Dict[str, PerformanceMetrics] = {}

    @contextmanager
    def measure(self, operation: str, **metadata: Any) -> Iterator[TimingContext]:
        """Time the enclosed block and record it under ``operation``."""
        timer = TimingContext(operation, self.logger, metadata, auto_log=self.auto_log)
        try:
            with timer:
                yield timer
        finally:
            if self.track_metrics and timer.timing is not None:
                self._metrics.setdefault(operation, PerformanceMetrics(operation)).add_timing(timer.timing)

    def get_metrics(self, operation: str) -> PerformanceMetrics:
        """Statistics for ``operation``; empty when it never ran."""
        return self._metrics.get(operation) or PerformanceMetrics(operation)

    def reset_metrics(self) -> None:
        self._metrics = {}

    def get_summary(self) -> Dict[str, Any]:
        total_duration = sum(m.total_duration for m in self._metrics.values())
        return {
            "total_operations": len(self._metrics),
            "total_calls": sum(m.total_calls for m in self._metrics.values()),
            "total_duration": total_duration,
            "total_duration_formatted": FormatUtils.format_duration(total_duration),
            "operations": {op: m.to_dict() for op, m in self._metrics.items()},
        }

    def __repr__(self) -> str:
        return f"PerformanceLogger(name={self.name!r}, operations={len(self._metrics)}, auto_log={self.auto_log})"
