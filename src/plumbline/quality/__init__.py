"""Table health and fleet data-quality scoring."""

from .fleet import FleetQualityAggregator
from .health import TableHealthScorer
from .models import (
    ColumnStat,
    FleetQualityReport,
    IssueKind,
    QualityIssue,
    TableHealthReport,
    TableMetadata,
    TableScore,
)
from .profiler import ColumnQualityProfiler

__all__ = [
    "ColumnQualityProfiler",
    "ColumnStat",
    "FleetQualityAggregator",
    "FleetQualityReport",
    "IssueKind",
    "QualityIssue",
    "TableHealthReport",
    "TableHealthScorer",
    "TableMetadata",
    "TableScore",
]
