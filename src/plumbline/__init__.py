"""Plumbline - Warehouse rightsizing and data-quality scoring.

Plumbline turns warehouse query telemetry and table metadata into ranked
rightsizing recommendations and table health scores. All scoring is
deterministic; fetching the telemetry is left to collaborators.

Modules:
    core: Exceptions, protocols and shared utilities
    config: Configuration models
    logging: Structured logging framework
    sizing: Size tiers, usage aggregation and the rightsizing advisor
    quality: Table health scoring and fleet aggregation

Example:
    >>> from plumbline.engine import ScoringEngine
    >>> from plumbline.logging import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> engine = ScoringEngine.from_config_file("plumbline.yaml")
    >>> estimates = engine.warehouse_recommendations(warehouses, telemetry, metering)
    >>> logger.info("Recommendations ready", count=len(estimates))
"""

from . import core, config, logging, sizing, quality

__version__ = "0.1.0"
__title__ = "Plumbline"
__description__ = "Warehouse rightsizing and data-quality scoring"
__author__ = "Plumbline Team"
__license__ = "MIT"

__all__ = [
    "core",
    "config",
    "logging",
    "sizing",
    "quality",
    "__version__",
    "__title__",
    "__description__",
    "__author__",
    "__license__",
]
