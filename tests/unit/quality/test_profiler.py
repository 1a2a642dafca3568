"""Unit tests for column quality profiling."""

import pytest

from plumbline.config.models import QualityConfig
from plumbline.core.exceptions import InvalidInputError
from plumbline.quality.models import ColumnStat, IssueKind
from plumbline.quality.profiler import ColumnQualityProfiler, duplicate_percentage


def columns(*null_percentages):
    return [ColumnStat(f"C{i}", pct, 1) for i, pct in enumerate(null_percentages)]


class TestColumnStat:
    """Test column statistics validation."""

    @pytest.mark.parametrize("pct", [-0.1, 100.5])
    def test_out_of_range_null_percentage_rejected(self, pct):
        with pytest.raises(InvalidInputError) as exc_info:
            ColumnStat("EMAIL", pct, 0)
        assert exc_info.value.code == "INVALID_PERCENTAGE"

    def test_negative_distinct_count_rejected(self):
        with pytest.raises(InvalidInputError):
            ColumnStat("EMAIL", 0.0, -1)


class TestProfile:
    """Test ColumnQualityProfiler.profile."""

    def test_clean_columns_score_100(self):
        score, issues = ColumnQualityProfiler().profile(columns(0, 5, 20))

        assert score == 100
        assert issues == []

    def test_single_high_null_column(self):
        """Test one column at 21% nulls costs 5 points and raises one issue."""
        score, issues = ColumnQualityProfiler().profile(columns(21.0))

        assert score == 95
        assert len(issues) == 1
        assert issues[0].kind is IssueKind.HIGH_NULLS
        assert issues[0].severity_penalty == 5
        assert "C0" in issues[0].description

    def test_threshold_is_exclusive(self):
        score, issues = ColumnQualityProfiler().profile(columns(20.0))

        assert score == 100
        assert issues == []

    def test_one_issue_names_every_flagged_column(self):
        score, issues = ColumnQualityProfiler().profile(columns(50, 1, 90))

        assert score == 90
        assert len(issues) == 1
        assert "C0" in issues[0].description and "C2" in issues[0].description
        assert "C1" not in issues[0].description

    def test_penalty_is_capped(self):
        score, issues = ColumnQualityProfiler().profile(columns(*[80] * 10))

        assert score == 70
        assert issues[0].severity_penalty == 30

    def test_penalty_is_per_column_not_by_severity(self):
        mild, _ = ColumnQualityProfiler().profile(columns(21))
        severe, _ = ColumnQualityProfiler().profile(columns(100))

        assert mild == severe == 95

    def test_no_columns(self):
        assert ColumnQualityProfiler().profile([]) == (100, [])

    def test_duplicates_reported_without_penalty(self):
        score, issues = ColumnQualityProfiler().profile([], row_count=100, duplicate_row_count=6)

        assert score == 100
        assert [i.kind for i in issues] == [IssueKind.DUPLICATES]
        assert issues[0].severity_penalty == 0

    def test_duplicates_at_threshold_not_reported(self):
        _, issues = ColumnQualityProfiler().profile([], row_count=100, duplicate_row_count=5)

        assert issues == []

    def test_custom_config(self):
        profiler = ColumnQualityProfiler(QualityConfig(high_null_threshold=50, null_penalty_per_column=10))

        score, _ = profiler.profile(columns(40, 60, 70))

        assert score == 80


class TestDuplicatePercentage:
    """Test duplicate share calculation."""

    @pytest.mark.parametrize("duplicates,rows,expected", [
        (10, 100, 10.0),
        (0, 100, 0.0),
        (5, 0, 0.0),
        (None, 100, 0.0),
        (3, None, 0.0),
    ])
    def test_values(self, duplicates, rows, expected):
        assert duplicate_percentage(duplicates, rows) == expected
