"""Pytest configuration and shared fixtures.

This module provides pytest configuration and shared fixtures for all tests
in the Plumbline test suite.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List

import pytest
import structlog

from plumbline.logging.factory import get_factory
from plumbline.quality.models import ColumnStat, TableMetadata
from plumbline.sizing.usage import CreditMeteringRecord, QueryRecord, UsageWindow


LOG_CAPTURE = structlog.testing.LogCapture()


def configure_test_logging() -> None:
    """Route structlog into an in-memory capture so tests stay quiet."""
    structlog.reset_defaults()
    structlog.configure(
        processors=[LOG_CAPTURE],
        logger_factory=structlog.testing.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )


configure_test_logging()

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolate_logging():
    """Keep the global logger factory from reconfiguring logging mid-test."""
    factory = get_factory()
    factory.initialized = True
    yield
    configure_test_logging()
    factory.initialized = True
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.WARNING)


@pytest.fixture
def captured_logs() -> List[dict]:
    """Structlog events emitted during the test."""
    LOG_CAPTURE.entries.clear()
    return LOG_CAPTURE.entries


@pytest.fixture
def now() -> datetime:
    """The instant every test treats as the present."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def make_usage() -> Callable[..., UsageWindow]:
    """Factory for usage windows with sensible defaults."""
    def _make(
        *,
        resource_name: str = "ANALYTICS_WH",
        query_count: int = 40,
        avg_execution_time_seconds: float = 90.0,
        total_execution_time_seconds: float = None,
        credits_used: float = 50.0,
        period_days: int = 30,
    ) -> UsageWindow:
        if total_execution_time_seconds is None:
            total_execution_time_seconds = avg_execution_time_seconds * query_count
        return UsageWindow(
            resource_name=resource_name,
            period_days=period_days,
            query_count=query_count,
            avg_execution_time_seconds=avg_execution_time_seconds,
            total_execution_time_seconds=total_execution_time_seconds,
            credits_used=credits_used,
        )

    return _make


@pytest.fixture
def make_table() -> Callable[..., TableMetadata]:
    """Factory for table metadata relative to FIXED_NOW."""
    def _make(
        *,
        table_name: str = "ORDERS",
        row_count: int = 1000,
        age_days: float = 365,
        updated_days_ago: float = 1,
        null_percentages: List[float] = (),
        duplicate_row_count: int = None,
    ) -> TableMetadata:
        return TableMetadata(
            table_name=table_name,
            row_count=row_count,
            created_at=FIXED_NOW - timedelta(days=age_days),
            last_altered_at=FIXED_NOW - timedelta(days=updated_days_ago),
            columns=[
                ColumnStat(column_name=f"COL_{i}", null_percentage=pct, distinct_count=10)
                for i, pct in enumerate(null_percentages)
            ],
            duplicate_row_count=duplicate_row_count,
        )

    return _make


@pytest.fixture
def sample_query_records() -> List[QueryRecord]:
    """Two warehouses inside the 30-day window plus one stale record."""
    return [
        QueryRecord("ETL_WH", 90000, FIXED_NOW - timedelta(days=1)),
        QueryRecord("BI_WH", 2000, FIXED_NOW - timedelta(days=2)),
        QueryRecord("ETL_WH", 30000, FIXED_NOW - timedelta(days=3)),
        QueryRecord("BI_WH", 4000, FIXED_NOW - timedelta(days=40)),
    ]


@pytest.fixture
def sample_credit_records() -> List[CreditMeteringRecord]:
    return [
        CreditMeteringRecord("ETL_WH", (FIXED_NOW - timedelta(days=1)).date(), 10.0),
        CreditMeteringRecord("ETL_WH", (FIXED_NOW - timedelta(days=3)).date(), 5.0),
        CreditMeteringRecord("ETL_WH", (FIXED_NOW - timedelta(days=45)).date(), 100.0),
        CreditMeteringRecord("BI_WH", (FIXED_NOW - timedelta(days=2)).date(), 2.5),
    ]


@pytest.fixture
def sample_config_data() -> dict:
    """Sample engine configuration data for testing."""
    return {
        "environment": "testing",
        "pricing": {"credit_unit_price": 2.5},
        "rightsizing": {"top_recommendations": 3},
        "quality": {"stale_after_days": 14},
        "logging": {"level": "debug", "format": "text", "console_output": False},
        "performance": {"max_concurrent_operations": 2},
    }


@pytest.fixture
def config_file(tmp_path: Path, sample_config_data: dict) -> Path:
    """Create temporary configuration file."""
    import yaml

    config_path = tmp_path / "plumbline.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_data, f)
    return config_path


# Pytest markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (slower, real dependencies)"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests that take > 1 second"
    )


# Auto-mark tests based on their location
def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    tests_root = Path(__file__).parent
    for item in items:
        try:
            test_path = Path(item.path).relative_to(tests_root)
        except ValueError:
            continue

        if test_path.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)
        elif test_path.parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
            if not any(mark.name == "slow" for mark in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
