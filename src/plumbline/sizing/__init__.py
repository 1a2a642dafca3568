"""Warehouse rightsizing: size tiers, usage aggregation and recommendations."""

from .advisor import CostEstimate, RightsizingAdvisor
from .tiers import DEFAULT_TIERS, SizeTier, SizeTierTable
from .usage import (
    CreditMeteringRecord,
    DailyUsage,
    QueryRecord,
    UsageAggregator,
    UsageWindow,
    parse_period,
)

__all__ = [
    "CostEstimate",
    "CreditMeteringRecord",
    "DailyUsage",
    "DEFAULT_TIERS",
    "QueryRecord",
    "RightsizingAdvisor",
    "SizeTier",
    "SizeTierTable",
    "UsageAggregator",
    "UsageWindow",
    "parse_period",
]
