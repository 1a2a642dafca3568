# src/plumbline/quality/health.py
"""Table health scoring."""

from typing import List, Optional

from .models import IssueKind, QualityIssue, TableHealthReport, TableMetadata
from .profiler import MAX_SCORE, ColumnQualityProfiler, duplicate_percentage
from ..config.models import QualityConfig
from ..core.exceptions import AnalysisError, ErrorCodes, InvalidInputError, PlumblineException
from ..core.utils import Clock, ceil_days_between, ensure_utc, mean, utc_now
from ..logging import get_logger

EMPTY_TABLE_RECOMMENDATION = "Investigate why the table has no data"
HIGH_NULL_RECOMMENDATION = "Add validation for columns with high null rates"
DUPLICATE_RECOMMENDATION = "Deduplicate rows at ingestion"
STALE_TABLE_RECOMMENDATION = "Verify if the table should be receiving regular updates"


class TableHealthScorer:
    """Scores one table from 0 to 100.

    Starts at 100 and applies every check: an empty table, high-null
    columns (via the column profiler) and staleness. The score never goes
    below 0. Time comes from ``clock`` so a fixed clock gives repeatable
    reports.

    Example:
        >>> scorer = TableHealthScorer(clock=lambda: now)
        >>> scorer.score(table).health_score
        65
    """

    def __init__(
        self,
        config: Optional[QualityConfig] = None,
        *,
        clock: Clock = utc_now,
        profiler: Optional[ColumnQualityProfiler] = None,
    ) -> None:
        self.config = config or QualityConfig()
        self.clock = clock
        self.profiler = profiler or ColumnQualityProfiler(self.config)
        self.logger = get_logger("quality.health")

    def score(self, table: TableMetadata) -> TableHealthReport:
        """Build the health report of ``table``.

        Raises:
            InvalidInputError: If the row count is negative
            AnalysisError: If the table cannot be scored
        """
        if table.row_count < 0:
            raise InvalidInputError(
                f"Row count of {table.table_name} must be non-negative, got {table.row_count}",
                code=ErrorCodes.NEGATIVE_ROW_COUNT,
                context={"table_name": table.table_name, "row_count": table.row_count},
            )

        try:
            report = self._score(table)
        except PlumblineException:
            raise
        except (AttributeError, ArithmeticError, TypeError, ValueError) as e:
            raise AnalysisError(
                f"Failed to score table {table.table_name}",
                code=ErrorCodes.TABLE_SCORING_FAILED,
                context={"table_name": table.table_name},
                cause=e,
            ) from e

        self.logger.debug(
            "Table scored",
            table_name=report.table_name,
            health_score=report.health_score,
            issue_count=len(report.issues),
        )
        return report

    def _score(self, table: TableMetadata) -> TableHealthReport:
        now = ensure_utc(self.clock())
        score = MAX_SCORE
        issues: List[QualityIssue] = []
        recommendations: List[str] = []

        if table.row_count == 0:
            score -= self.config.empty_table_penalty
            issues.append(QualityIssue(
                kind=IssueKind.EMPTY,
                description="Table is empty",
                severity_penalty=self.config.empty_table_penalty,
            ))
            recommendations.append(EMPTY_TABLE_RECOMMENDATION)

        column_score, column_issues = self.profiler.profile(
            table.columns,
            row_count=table.row_count,
            duplicate_row_count=table.duplicate_row_count,
        )
        score -= MAX_SCORE - column_score
        issues.extend(column_issues)
        kinds = {issue.kind for issue in column_issues}
        if IssueKind.HIGH_NULLS in kinds:
            recommendations.append(HIGH_NULL_RECOMMENDATION)
        if IssueKind.DUPLICATES in kinds:
            recommendations.append(DUPLICATE_RECOMMENDATION)

        days_since_update = ceil_days_between(table.last_altered_at, now)
        if days_since_update > self.config.stale_after_days:
            score -= self.config.stale_penalty
            issues.append(QualityIssue(
                kind=IssueKind.STALE,
                description=f"Table hasn't been updated in {days_since_update} days",
                severity_penalty=self.config.stale_penalty,
            ))
            recommendations.append(STALE_TABLE_RECOMMENDATION)

        # Null cells over total cells; every column has row_count cells.
        if table.row_count > 0 and table.columns:
            null_percentage = mean(c.null_percentage for c in table.columns)
        else:
            null_percentage = 0.0

        return TableHealthReport(
            table_name=table.table_name,
            row_count=table.row_count,
            age_in_days=ceil_days_between(table.created_at, now),
            days_since_update=days_since_update,
            columns=tuple(table.columns),
            health_score=max(0, score),
            issues=tuple(issues),
            recommendations=tuple(recommendations),
            null_percentage=null_percentage,
            duplicate_percentage=duplicate_percentage(table.duplicate_row_count, table.row_count),
        )
