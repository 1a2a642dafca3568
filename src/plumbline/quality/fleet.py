# src/plumbline/quality/fleet.py
"""Fleet-wide quality roll-up."""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, TypeVar

from .health import TableHealthScorer
from .models import FleetQualityReport, TableHealthReport, TableMetadata, TableScore
from ..config.models import PerformanceConfig, QualityConfig
from ..core.utils import mean, round_half_up
from ..logging import get_logger, get_performance_logger

T = TypeVar("T")

NULL_RATE_RECOMMENDATION = "Implement data validation rules to reduce null values"
DUPLICATE_RATE_RECOMMENDATION = "Review data ingestion processes to prevent duplicate records"


class FleetQualityAggregator:
    """Rolls table health reports up into one fleet score.

    The overall score is the rounded mean of the table scores, with
    halves rounding up (82.5 becomes 83). With no tables the
    score is the neutral ``neutral_fleet_score``.

    Example:
        >>> fleet = FleetQualityAggregator()
        >>> fleet.aggregate([]).overall_score
        75
    """

    def __init__(
        self,
        config: Optional[QualityConfig] = None,
        performance: Optional[PerformanceConfig] = None,
    ) -> None:
        self.config = config or QualityConfig()
        self.performance = performance or PerformanceConfig()
        self.logger = get_logger("quality.fleet")
        self.perf_logger = get_performance_logger("quality.fleet")

    def grade(self, score: int) -> str:
        if score >= self.config.good_score:
            return "good"
        if score >= self.config.fair_score:
            return "fair"
        return "poor"

    def sample(self, tables: Sequence[T], sample_size: Optional[int] = None) -> List[T]:
        """First ``sample_size`` tables, in listing order."""
        size = sample_size if sample_size is not None else self.config.sample_size
        return list(tables[:max(0, size)])

    def evaluate(
        self,
        tables: Sequence[TableMetadata],
        scorer: TableHealthScorer,
        *,
        max_workers: Optional[int] = None,
    ) -> List[TableHealthReport]:
        """Score every table; reports come back in the order of ``tables``.

        Tables are scored independently on a thread pool. The first
        scoring error propagates to the caller.
        """
        if not tables:
            return []

        workers = max_workers or self.performance.max_concurrent_operations
        with self.perf_logger.measure("score_tables", table_count=len(tables)):
            with ThreadPoolExecutor(max_workers=min(workers, len(tables))) as executor:
                return list(executor.map(scorer.score, tables))

    def aggregate(self, reports: Sequence[TableHealthReport]) -> FleetQualityReport:
        """Combine table reports into a fleet report."""
        if reports:
            overall = round_half_up(mean(r.health_score for r in reports))
        else:
            overall = self.config.neutral_fleet_score

        avg_null = mean(r.null_percentage for r in reports)
        avg_duplicates = mean(r.duplicate_percentage for r in reports)
        with_issues = sum(1 for r in reports if r.has_issues)

        recommendations = []
        if avg_null > self.config.fleet_null_threshold:
            recommendations.append(NULL_RATE_RECOMMENDATION)
        if avg_duplicates > self.config.fleet_duplicate_threshold:
            recommendations.append(DUPLICATE_RATE_RECOMMENDATION)
        if with_issues > 0:
            recommendations.append(f"Address issues in {with_issues} tables")

        report = FleetQualityReport(
            overall_score=overall,
            per_table_scores=tuple(
                TableScore(name=r.table_name, score=r.health_score, issues=len(r.issues))
                for r in reports
            ),
            avg_null_percentage=avg_null,
            avg_duplicate_percentage=avg_duplicates,
            tables_with_issues=with_issues,
            recommendations=tuple(recommendations),
            grade=self.grade(overall),
        )

        self.logger.info(
            "Fleet quality aggregated",
            table_count=len(reports),
            overall_score=overall,
            tables_with_issues=with_issues,
        )
        return report
