# src/plumbline/quality/models.py
"""Data models for table health and fleet quality scoring."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..core.utils import ValidationUtils, ensure_utc


class IssueKind(str, Enum):
    HIGH_NULLS = "HIGH_NULLS"
    DUPLICATES = "DUPLICATES"
    EMPTY = "EMPTY"
    STALE = "STALE"


@dataclass(frozen=True)
class ColumnStat:
    """Null rate and cardinality of one column."""
    column_name: str
    null_percentage: float
    distinct_count: int = 0

    def __post_init__(self):
        ValidationUtils.require_percentage(self.null_percentage, f"{self.column_name}.null_percentage")
        ValidationUtils.require_non_negative(self.distinct_count, f"{self.column_name}.distinct_count")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column_name": self.column_name,
            "null_percentage": self.null_percentage,
            "distinct_count": self.distinct_count,
        }


@dataclass(frozen=True)
class QualityIssue:
    """A detected problem and the points it cost the table."""
    kind: IssueKind
    description: str
    severity_penalty: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "description": self.description,
            "severity_penalty": self.severity_penalty,
        }


@dataclass
class TableMetadata:
    """Everything the health scorer needs to know about one table."""
    table_name: str
    row_count: int
    created_at: datetime
    last_altered_at: datetime
    columns: List[ColumnStat] = field(default_factory=list)
    duplicate_row_count: Optional[int] = None

    def __post_init__(self):
        self.created_at = ensure_utc(self.created_at)
        self.last_altered_at = ensure_utc(self.last_altered_at)


@dataclass(frozen=True)
class TableHealthReport:
    """Health of one table at the time it was scored."""
    table_name: str
    row_count: int
    age_in_days: int
    days_since_update: int
    columns: Tuple[ColumnStat, ...]
    health_score: int
    issues: Tuple[QualityIssue, ...] = ()
    recommendations: Tuple[str, ...] = ()
    null_percentage: float = 0.0
    duplicate_percentage: float = 0.0

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "row_count": self.row_count,
            "age_in_days": self.age_in_days,
            "days_since_update": self.days_since_update,
            "columns": [c.to_dict() for c in self.columns],
            "health_score": self.health_score,
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": list(self.recommendations),
            "null_percentage": round(self.null_percentage, 2),
            "duplicate_percentage": round(self.duplicate_percentage, 2),
        }


@dataclass(frozen=True)
class TableScore:
    name: str
    score: int
    issues: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.score, "issues": self.issues}


@dataclass(frozen=True)
class FleetQualityReport:
    """Quality roll-up across the scored tables."""
    overall_score: int
    per_table_scores: Tuple[TableScore, ...]
    avg_null_percentage: float
    avg_duplicate_percentage: float
    tables_with_issues: int
    recommendations: Tuple[str, ...] = ()
    grade: str = "fair"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "grade": self.grade,
            "per_table_scores": [s.to_dict() for s in self.per_table_scores],
            "avg_null_percentage": round(self.avg_null_percentage, 2),
            "avg_duplicate_percentage": round(self.avg_duplicate_percentage, 2),
            "tables_with_issues": self.tables_with_issues,
            "recommendations": list(self.recommendations),
        }
