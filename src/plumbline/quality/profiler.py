# src/plumbline/quality/profiler.py
"""Column-level quality profiling."""

from typing import List, Optional, Sequence, Tuple

from .models import ColumnStat, IssueKind, QualityIssue
from ..config.models import QualityConfig
from ..logging import get_logger

MAX_SCORE = 100


def duplicate_percentage(duplicate_row_count: Optional[int], row_count: Optional[int]) -> float:
    """Share of duplicate rows in percent; 0 when either count is unknown or zero."""
    if not duplicate_row_count or not row_count:
        return 0.0
    return duplicate_row_count / row_count * 100


class ColumnQualityProfiler:
    """Scores a table's columns on null rates and duplicate rows.

    Every column whose null percentage exceeds ``high_null_threshold``
    costs ``null_penalty_per_column`` points, up to ``null_penalty_cap``.
    Duplicates are reported but do not lower the score.

    Example:
        >>> profiler = ColumnQualityProfiler()
        >>> profiler.profile([ColumnStat("email", 21.0, 900)])
        (95, [QualityIssue(kind=<IssueKind.HIGH_NULLS: 'HIGH_NULLS'>, ...)])
    """

    def __init__(self, config: Optional[QualityConfig] = None) -> None:
        self.config = config or QualityConfig()
        self.logger = get_logger("quality.profiler")

    def high_null_columns(self, columns: Sequence[ColumnStat]) -> List[ColumnStat]:
        return [c for c in columns if c.null_percentage > self.config.high_null_threshold]

    def profile(
        self,
        columns: Sequence[ColumnStat],
        *,
        row_count: Optional[int] = None,
        duplicate_row_count: Optional[int] = None,
    ) -> Tuple[int, List[QualityIssue]]:
        """Score ``columns`` and list the issues found.

        Returns:
            ``(score, issues)`` with the score in [0, 100]
        """
        score = MAX_SCORE
        issues: List[QualityIssue] = []

        flagged = self.high_null_columns(columns)
        if flagged:
            penalty = min(self.config.null_penalty_per_column * len(flagged), self.config.null_penalty_cap)
            score -= penalty
            names = ", ".join(c.column_name for c in flagged)
            issues.append(QualityIssue(
                kind=IssueKind.HIGH_NULLS,
                description=(
                    f"{len(flagged)} column(s) have more than "
                    f"{self.config.high_null_threshold:g}% null values: {names}"
                ),
                severity_penalty=penalty,
            ))

        duplicates = duplicate_percentage(duplicate_row_count, row_count)
        if duplicates > self.config.duplicate_threshold:
            issues.append(QualityIssue(
                kind=IssueKind.DUPLICATES,
                description=f"{duplicates:.1f}% of rows are duplicates",
                severity_penalty=0,
            ))

        score = max(0, score)
        self.logger.debug(
            "Columns profiled",
            column_count=len(columns),
            high_null_columns=len(flagged),
            score=score,
        )
        return score, issues
