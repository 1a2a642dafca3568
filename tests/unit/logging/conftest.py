"""Logging-specific test configuration and fixtures."""

import pytest

from plumbline.config.models import LoggingConfig
from plumbline.logging.factory import LoggerFactory


@pytest.fixture
def temp_log_file(tmp_path):
    """Path for a log file inside a scratch directory."""
    return tmp_path / "logs" / "plumbline.log"


@pytest.fixture
def sample_logging_config(temp_log_file):
    """Create sample logging configuration."""
    return LoggingConfig(
        level="INFO",
        format="json",
        file_path=temp_log_file,
        console_output=True,
        max_file_size=1048576,
        backup_count=3,
    )


@pytest.fixture
def logger_factory():
    """Create clean logger factory for testing."""
    factory = LoggerFactory()
    yield factory
    factory.shutdown()
