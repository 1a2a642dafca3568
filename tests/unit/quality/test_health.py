"""Unit tests for table health scoring."""

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from plumbline.config.models import QualityConfig
from plumbline.core.exceptions import InvalidInputError
from plumbline.quality.health import (
    EMPTY_TABLE_RECOMMENDATION,
    HIGH_NULL_RECOMMENDATION,
    STALE_TABLE_RECOMMENDATION,
    TableHealthScorer,
)
from plumbline.quality.models import IssueKind


@pytest.fixture
def scorer(fixed_clock) -> TableHealthScorer:
    return TableHealthScorer(clock=fixed_clock)


class TestScore:
    """Test TableHealthScorer.score."""

    def test_healthy_table_scores_100(self, scorer, make_table):
        report = scorer.score(make_table(null_percentages=[0, 10]))

        assert report.health_score == 100
        assert report.issues == ()
        assert report.recommendations == ()

    def test_empty_table_updated_yesterday(self, scorer, make_table):
        """Test an empty, fresh table scores 70."""
        report = scorer.score(make_table(row_count=0, updated_days_ago=1))

        assert report.health_score == 70
        assert [i.kind for i in report.issues] == [IssueKind.EMPTY]
        assert report.issues[0].description == "Table is empty"
        assert report.recommendations == (EMPTY_TABLE_RECOMMENDATION,)

    def test_high_nulls_and_stale(self, scorer, make_table):
        """Test 1000 rows, three high-null columns, 45 days stale scores 65."""
        table = make_table(row_count=1000, null_percentages=[25, 30, 50, 0], updated_days_ago=45)

        report = scorer.score(table)

        assert report.health_score == 65
        assert report.days_since_update == 45
        assert [i.kind for i in report.issues] == [IssueKind.HIGH_NULLS, IssueKind.STALE]
        assert report.issues[1].description == "Table hasn't been updated in 45 days"
        assert report.recommendations == (HIGH_NULL_RECOMMENDATION, STALE_TABLE_RECOMMENDATION)

    def test_staleness_rounds_partial_days_up(self, scorer, make_table):
        report = scorer.score(make_table(updated_days_ago=30.1))

        assert report.days_since_update == 31
        assert report.health_score == 80

    def test_exactly_thirty_days_is_not_stale(self, scorer, make_table):
        report = scorer.score(make_table(updated_days_ago=30))

        assert report.days_since_update == 30
        assert report.health_score == 100

    def test_age_in_days(self, scorer, make_table):
        assert scorer.score(make_table(age_days=10.5)).age_in_days == 11

    def test_score_never_negative(self, fixed_clock, make_table):
        scorer = TableHealthScorer(
            QualityConfig(empty_table_penalty=60, stale_penalty=60),
            clock=fixed_clock,
        )

        report = scorer.score(make_table(row_count=0, updated_days_ago=90, null_percentages=[99]))

        assert report.health_score == 0

    def test_negative_row_count_rejected(self, scorer, make_table):
        with pytest.raises(InvalidInputError) as exc_info:
            scorer.score(make_table(row_count=-1))
        assert exc_info.value.code == "NEGATIVE_ROW_COUNT"

    def test_future_update_counts_absolute_days(self, scorer, make_table):
        report = scorer.score(make_table(updated_days_ago=-2))

        assert report.days_since_update == 2

    def test_naive_datetimes_treated_as_utc(self, scorer, make_table, now):
        table = make_table()
        table.last_altered_at = (now - timedelta(days=40)).replace(tzinfo=None)
        table.created_at = (now - timedelta(days=400)).replace(tzinfo=None)

        report = scorer.score(table)

        assert report.days_since_update == 40
        assert report.age_in_days == 400

    def test_clock_drives_staleness(self, make_table, now):
        later = TableHealthScorer(clock=lambda: now + timedelta(days=60))

        assert later.score(make_table(updated_days_ago=1)).health_score == 80

    def test_scoring_is_deterministic(self, scorer, make_table):
        table = make_table(row_count=0, null_percentages=[50], updated_days_ago=40)

        assert scorer.score(table) == scorer.score(table)


class TestSignals:
    """Test table-level null and duplicate signals."""

    def test_null_percentage_is_share_of_null_cells(self, scorer, make_table):
        report = scorer.score(make_table(row_count=100, null_percentages=[10, 30]))

        assert report.null_percentage == pytest.approx(20.0)

    def test_null_percentage_zero_without_cells(self, scorer, make_table):
        assert scorer.score(make_table(row_count=0, null_percentages=[50])).null_percentage == 0.0
        assert scorer.score(make_table(null_percentages=[])).null_percentage == 0.0

    def test_duplicate_percentage(self, scorer, make_table):
        report = scorer.score(make_table(row_count=200, duplicate_row_count=20))

        assert report.duplicate_percentage == pytest.approx(10.0)
        assert report.health_score == 100
        assert [i.kind for i in report.issues] == [IssueKind.DUPLICATES]


class TestReport:
    """Test the report record."""

    def test_report_is_immutable(self, scorer, make_table):
        report = scorer.score(make_table())

        with pytest.raises(FrozenInstanceError):
            report.health_score = 0

    def test_to_dict(self, scorer, make_table):
        report = scorer.score(make_table(row_count=0, null_percentages=[25]))

        data = report.to_dict()

        assert data["table_name"] == "ORDERS"
        assert data["health_score"] == 65
        assert data["issues"][0]["kind"] == "EMPTY"
        assert data["columns"][0] == {"column_name": "COL_0", "null_percentage": 25, "distinct_count": 10}
