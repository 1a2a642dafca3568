"""Configuration models for the Plumbline engine.

This module defines Pydantic models for every tunable used by the sizing
and quality engines. The defaults reproduce the documented scoring rules,
so an empty configuration yields the reference behavior.

Classes:
    BaseConfig: Base configuration class
    PricingConfig: Credit pricing
    RightsizingConfig: Warehouse rightsizing thresholds
    QualityConfig: Table health and fleet quality thresholds
    LoggingConfig: Logging configuration
    PerformanceConfig: Concurrency limits
    EngineConfig: Top-level configuration

Example:
    >>> config = EngineConfig.from_dict({"pricing": {"credit_unit_price": 2.5}})
    >>> config.pricing.credit_unit_price
    2.5
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ConfigurationError, ErrorCodes

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class BaseConfig(BaseModel):
    """Base configuration class with common functionality.

    Provides strict field handling, environment variable resolution and
    serialization helpers.

    Example:
        >>> class MyConfig(BaseConfig):
        ...     name: str
        ...     value: int = 42
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        use_enum_values=True,
        validate_default=True,
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_environment_variables(cls, values: Any) -> Any:
        """Resolve environment variables in configuration values.

        Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.
        """
        def replace_env_var(match: "re.Match[str]") -> str:
            var_spec = match.group(1)
            if ":" in var_spec:
                var_name, default = var_spec.split(":", 1)
            else:
                var_name, default = var_spec, ""
            return os.getenv(var_name, default)

        def resolve_value(value: Any) -> Any:
            if isinstance(value, str):
                return _ENV_PATTERN.sub(replace_env_var, value)
            elif isinstance(value, dict):
                return {k: resolve_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [resolve_value(item) for item in value]
            else:
                return value

        if not isinstance(values, dict):
            return values
        return {key: resolve_value(value) for key, value in values.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a YAML/JSON friendly dictionary."""
        data = self.model_dump()

        def plain_value(value: Any) -> Any:
            if isinstance(value, dict):
                return {k: plain_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [plain_value(item) for item in value]
            elif isinstance(value, Path):
                return str(value)
            return value

        return plain_value(data)


class PricingConfig(BaseConfig):
    """Credit pricing.

    Attributes:
        credit_unit_price: USD charged per warehouse credit
        currency: Currency code used in reports
    """

    credit_unit_price: float = Field(3.0, gt=0, description="USD per credit")
    currency: Literal["USD"] = Field("USD", description="Report currency")


class RightsizingConfig(BaseConfig):
    """Warehouse rightsizing thresholds.

    Attributes:
        long_running_query_seconds: Average execution time above which a
            lightly used warehouse is considered oversized
        low_query_count: Query count below which downsizing is considered
        idle_query_count: Query count below which auto-suspend is advised
        idle_cost_factor: Share of current cost kept after auto-suspend
        min_cost_usd: Fleet recommendations below this cost are dropped
        top_recommendations: Length of the fleet recommendation list
        default_period_days: Usage window when the caller gives none
        downsize_latency_factor: Projected execution-time increase after
            moving one tier down
    """

    long_running_query_seconds: float = Field(60.0, ge=0)
    low_query_count: int = Field(100, ge=0)
    idle_query_count: int = Field(50, ge=0)
    idle_cost_factor: float = Field(0.7, ge=0, le=1)
    min_cost_usd: float = Field(10.0, ge=0)
    top_recommendations: int = Field(5, gt=0)
    default_period_days: int = Field(30, gt=0)
    downsize_latency_factor: float = Field(0.15, ge=0)


class QualityConfig(BaseConfig):
    """Table health and fleet quality thresholds.

    Attributes:
        high_null_threshold: Column null percentage above which the column
            counts as high-null
        null_penalty_per_column: Points deducted per high-null column
        null_penalty_cap: Maximum total null penalty
        empty_table_penalty: Points deducted for an empty table
        stale_after_days: Days without updates before a table is stale
        stale_penalty: Points deducted for a stale table
        duplicate_threshold: Table duplicate percentage that raises an issue
        neutral_fleet_score: Fleet score when no table was evaluated
        fleet_null_threshold: Average null percentage triggering a fleet
            recommendation
        fleet_duplicate_threshold: Average duplicate percentage triggering
            a fleet recommendation
        good_score: Lower bound of the "good" grade
        fair_score: Lower bound of the "fair" grade
        sample_size: Tables scored per fleet report
    """

    high_null_threshold: float = Field(20.0, ge=0, le=100)
    null_penalty_per_column: int = Field(5, ge=0)
    null_penalty_cap: int = Field(30, ge=0)
    empty_table_penalty: int = Field(30, ge=0)
    stale_after_days: int = Field(30, ge=0)
    stale_penalty: int = Field(20, ge=0)
    duplicate_threshold: float = Field(5.0, ge=0, le=100)
    neutral_fleet_score: int = Field(75, ge=0, le=100)
    fleet_null_threshold: float = Field(10.0, ge=0, le=100)
    fleet_duplicate_threshold: float = Field(5.0, ge=0, le=100)
    good_score: int = Field(80, ge=0, le=100)
    fair_score: int = Field(60, ge=0, le=100)
    sample_size: int = Field(10, gt=0)

    @model_validator(mode="after")
    def validate_grade_bands(self) -> "QualityConfig":
        """Ensure fair_score <= good_score."""
        if self.fair_score > self.good_score:
            raise ValueError(
                f"fair_score ({self.fair_score}) must be <= good_score ({self.good_score})"
            )
        return self


class LoggingConfig(BaseConfig):
    """Logging configuration.

    Attributes:
        level: Log level
        format: Log format (json, text)
        file_path: Log file path
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep
        console_output: Enable console output
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )
    format: Literal["json", "text"] = Field("json", description="Log format")
    file_path: Optional[Path] = Field(None, description="Log file path")
    max_file_size: int = Field(10485760, gt=0, description="Max file size in bytes (10MB)")
    backup_count: int = Field(5, ge=0, description="Number of backup files")
    console_output: bool = Field(True, description="Enable console output")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v


class PerformanceConfig(BaseConfig):
    """Concurrency limits.

    Attributes:
        max_concurrent_operations: Worker threads used to score tables
    """

    max_concurrent_operations: int = Field(4, gt=0, description="Scoring workers")


class EngineConfig(BaseConfig):
    """Top-level configuration for the scoring engine.

    Example:
        >>> config = EngineConfig.from_file("plumbline.yaml")
        >>> config.rightsizing.top_recommendations
        5
    """

    environment: Literal["development", "staging", "production", "testing"] = Field(
        "development", description="Deployment environment"
    )
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    rightsizing: RightsizingConfig = Field(default_factory=RightsizingConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EngineConfig":
        """Build configuration from a plain dictionary.

        Raises:
            ConfigurationError: If the data fails validation
        """
        try:
            return cls(**(data or {}))
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Invalid engine configuration",
                code=ErrorCodes.CONFIG_INVALID,
                context={"errors": e.errors(include_url=False)},
                cause=e,
            ) from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "EngineConfig":
        """Load configuration from a YAML file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                code=ErrorCodes.CONFIG_NOT_FOUND,
                context={"path": str(config_path)},
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Configuration file is not valid YAML: {config_path}",
                code=ErrorCodes.CONFIG_INVALID,
                context={"path": str(config_path)},
                cause=e,
            ) from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration root must be a mapping",
                code=ErrorCodes.CONFIG_INVALID,
                context={"path": str(config_path)},
            )

        return cls.from_dict(data)
