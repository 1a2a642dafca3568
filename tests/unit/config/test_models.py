"""Unit tests for engine configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from plumbline.config.models import (
    EngineConfig,
    LoggingConfig,
    PricingConfig,
    QualityConfig,
    RightsizingConfig,
)
from plumbline.core.exceptions import ConfigurationError


class TestDefaults:
    """Test that defaults reproduce the standard scoring rules."""

    def test_pricing_defaults(self):
        assert PricingConfig().credit_unit_price == 3.0

    def test_rightsizing_defaults(self):
        config = RightsizingConfig()

        assert config.long_running_query_seconds == 60
        assert config.low_query_count == 100
        assert config.idle_query_count == 50
        assert config.idle_cost_factor == 0.7
        assert config.min_cost_usd == 10
        assert config.top_recommendations == 5
        assert config.default_period_days == 30

    def test_quality_defaults(self):
        config = QualityConfig()

        assert config.high_null_threshold == 20
        assert config.null_penalty_per_column == 5
        assert config.null_penalty_cap == 30
        assert config.empty_table_penalty == 30
        assert config.stale_after_days == 30
        assert config.stale_penalty == 20
        assert config.neutral_fleet_score == 75
        assert (config.good_score, config.fair_score) == (80, 60)

    def test_engine_defaults(self):
        config = EngineConfig()

        assert config.environment == "development"
        assert config.performance.max_concurrent_operations == 4
        assert config.logging.level == "INFO"


class TestValidation:
    """Test field validation."""

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            PricingConfig(credit_unit_price=0)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            RightsizingConfig(unknown_threshold=1)

    def test_validate_assignment(self):
        config = QualityConfig()

        with pytest.raises(ValidationError):
            config.stale_penalty = -1

    def test_grade_bands_must_be_ordered(self):
        with pytest.raises(ValidationError):
            QualityConfig(good_score=50, fair_score=60)

    def test_log_level_is_case_insensitive(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="chatty")

    def test_environment_is_lowercased(self):
        assert EngineConfig(environment="PRODUCTION").environment == "production"


class TestEnvironmentVariables:
    """Test ${VAR:default} expansion."""

    def test_resolves_set_variable(self, monkeypatch):
        monkeypatch.setenv("PLUMBLINE_CREDIT_PRICE", "4.5")

        config = PricingConfig(credit_unit_price="${PLUMBLINE_CREDIT_PRICE}")

        assert config.credit_unit_price == 4.5

    def test_uses_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("PLUMBLINE_LOG_LEVEL", raising=False)

        config = LoggingConfig(level="${PLUMBLINE_LOG_LEVEL:warning}")

        assert config.level == "WARNING"

    def test_nested_sections(self, monkeypatch):
        monkeypatch.setenv("PLUMBLINE_WORKERS", "8")

        config = EngineConfig.from_dict({"performance": {"max_concurrent_operations": "${PLUMBLINE_WORKERS}"}})

        assert config.performance.max_concurrent_operations == 8


class TestSerialization:
    """Test dictionary serialization."""

    def test_to_dict_converts_paths(self, tmp_path):
        config = LoggingConfig(file_path=tmp_path / "plumbline.log")

        data = config.to_dict()

        assert data["file_path"] == str(tmp_path / "plumbline.log")


class TestEngineConfigLoading:
    """Test EngineConfig.from_dict and from_file."""

    def test_from_dict(self, sample_config_data):
        config = EngineConfig.from_dict(sample_config_data)

        assert config.environment == "testing"
        assert config.pricing.credit_unit_price == 2.5
        assert config.rightsizing.top_recommendations == 3
        assert config.quality.stale_after_days == 14
        assert config.logging.level == "DEBUG"

    def test_from_dict_none_gives_defaults(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    def test_from_dict_wraps_validation_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_dict({"pricing": {"credit_unit_price": -1}})

        assert exc_info.value.code == "CONFIG_INVALID"
        assert exc_info.value.context["errors"]
        assert isinstance(exc_info.value.cause, ValidationError)

    def test_from_file(self, config_file):
        config = EngineConfig.from_file(config_file)

        assert config.performance.max_concurrent_operations == 2
        assert config.logging.format == "text"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_file(tmp_path / "missing.yaml")

        assert exc_info.value.code == "CONFIG_NOT_FOUND"

    def test_from_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("pricing: [unclosed")

        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_file(path)

        assert exc_info.value.code == "CONFIG_INVALID"

    def test_from_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            EngineConfig.from_file(path)

    def test_from_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert EngineConfig.from_file(Path(path)) == EngineConfig()
