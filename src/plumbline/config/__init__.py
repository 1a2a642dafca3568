"""Plumbline configuration management.

This package provides type-safe configuration for the sizing and quality
engines, with validation and environment variable support.

Classes:
    BaseConfig: Base configuration class
    EngineConfig: Top-level configuration
    PricingConfig: Credit pricing
    RightsizingConfig: Warehouse rightsizing thresholds
    QualityConfig: Table health thresholds
    LoggingConfig: Logging configuration
    PerformanceConfig: Concurrency limits

Example:
    >>> from plumbline.config import EngineConfig
    >>> config = EngineConfig.from_file("plumbline.yaml")
"""

from .models import (
    BaseConfig,
    EngineConfig,
    LoggingConfig,
    PerformanceConfig,
    PricingConfig,
    QualityConfig,
    RightsizingConfig,
)

__all__ = [
    "BaseConfig",
    "EngineConfig",
    "LoggingConfig",
    "PerformanceConfig",
    "PricingConfig",
    "QualityConfig",
    "RightsizingConfig",
]
