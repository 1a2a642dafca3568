# src/plumbline/sizing/advisor.py
"""Warehouse rightsizing recommendations and cost estimates."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .tiers import DEFAULT_TIERS, SizeTier, SizeTierTable
from .usage import UsageWindow
from ..config.models import PricingConfig, RightsizingConfig
from ..core.exceptions import ErrorCodes, PlumblineException, RecommendationError
from ..core.utils import FormatUtils, ValidationUtils
from ..logging import get_logger

SECONDS_PER_HOUR = 3600

COST_BASIS_CREDITS = "credits"
COST_BASIS_EXECUTION_TIME = "execution_time"

AUTO_SUSPEND_RATIONALE = "Configure auto-suspend to reduce idle time"


@dataclass
class CostEstimate:
    """Current and projected cost of one warehouse.

    ``savings_usd`` and ``savings_percent`` are derived from the two cost
    figures when the estimate is built, so the savings identity holds
    exactly. ``recommended_tier`` is None when the advice keeps the size.
    """
    resource_name: str
    current_tier: SizeTier
    current_cost_usd: float
    recommended_tier: Optional[SizeTier]
    recommended_cost_usd: float
    rationale: str
    cost_basis: str = COST_BASIS_CREDITS
    estimated_avg_execution_time_seconds: Optional[float] = None
    savings_usd: float = field(init=False)
    savings_percent: Optional[float] = field(init=False)

    def __post_init__(self):
        self.savings_usd = self.current_cost_usd - self.recommended_cost_usd
        if self.current_cost_usd > 0:
            self.savings_percent = self.savings_usd / self.current_cost_usd * 100
        else:
            self.savings_percent = None

    @property
    def changes_tier(self) -> bool:
        return self.recommended_tier is not None and self.recommended_tier != self.current_tier

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_name": self.resource_name,
            "current_tier": self.current_tier.name,
            "recommended_tier": self.recommended_tier.name if self.recommended_tier else None,
            "current_cost_usd": FormatUtils.round_currency(self.current_cost_usd),
            "recommended_cost_usd": FormatUtils.round_currency(self.recommended_cost_usd),
            "savings_usd": FormatUtils.round_currency(self.savings_usd),
            "savings_percent": round(self.savings_percent, 2) if self.savings_percent is not None else None,
            "rationale": self.rationale,
            "cost_basis": self.cost_basis,
            "estimated_avg_execution_time_seconds": self.estimated_avg_execution_time_seconds,
        }


class RightsizingAdvisor:
    """Recommends warehouse size changes from aggregated usage.

    Rules are evaluated in order and the first match wins:

    1. Long average execution time with few queries, and a smaller size
       exists: move one size down.
    2. Very few queries: keep the size, tighten auto-suspend.
    3. Otherwise no recommendation.

    Example:
        >>> advisor = RightsizingAdvisor()
        >>> estimate = advisor.recommend("Large", usage)
        >>> estimate.recommended_tier.name
        'Medium'
    """

    def __init__(
        self,
        config: Optional[RightsizingConfig] = None,
        pricing: Optional[PricingConfig] = None,
        *,
        tiers: Optional[SizeTierTable] = None,
    ) -> None:
        self.config = config or RightsizingConfig()
        self.pricing = pricing or PricingConfig()
        self.tiers = tiers or DEFAULT_TIERS
        self.logger = get_logger("sizing.advisor")

    def _execution_cost(self, tier: SizeTier, usage: UsageWindow) -> float:
        return (
            tier.cost_multiplier
            * self.pricing.credit_unit_price
            * usage.total_execution_time_seconds
            / SECONDS_PER_HOUR
        )

    def current_cost(self, tier: SizeTier, usage: UsageWindow) -> Tuple[float, str]:
        """Cost of ``usage`` on ``tier`` and the basis it was priced on.

        Metered credits are authoritative; without them the cost is
        estimated from execution time at the tier's hourly credit rate.
        """
        if usage.credits_used > 0:
            return usage.credits_used * self.pricing.credit_unit_price, COST_BASIS_CREDITS
        return self._execution_cost(tier, usage), COST_BASIS_EXECUTION_TIME

    def recommend(self, tier: Union[SizeTier, str], usage: UsageWindow) -> Optional[CostEstimate]:
        """Recommend a size change for one warehouse.

        Args:
            tier: Current size, as a tier or a free-text size name
            usage: Aggregated usage of the warehouse

        Returns:
            CostEstimate, or None when no rule applies

        Raises:
            InvalidInputError: If the size name is missing or usage is negative
            RecommendationError: If the estimate cannot be computed
        """
        if isinstance(tier, str) or tier is None:
            tier = self.tiers.resolve(tier)

        ValidationUtils.require_non_negative(usage.query_count, "query_count")
        ValidationUtils.require_non_negative(usage.credits_used, "credits_used")

        try:
            estimate = self._apply_rules(tier, usage)
        except PlumblineException:
            raise
        except (ArithmeticError, TypeError, ValueError) as e:
            raise RecommendationError(
                f"Failed to build recommendation for {usage.resource_name}",
                code=ErrorCodes.RECOMMENDATION_FAILED,
                context={"resource_name": usage.resource_name, "tier": tier.name},
                cause=e,
            ) from e

        if estimate is None:
            self.logger.debug("No rightsizing rule matched", resource_name=usage.resource_name, tier=tier.name)
        else:
            self.logger.debug(
                "Rightsizing recommendation",
                resource_name=usage.resource_name,
                tier=tier.name,
                recommended_tier=estimate.recommended_tier.name if estimate.recommended_tier else None,
                savings_usd=estimate.savings_usd,
            )
        return estimate

    def _apply_rules(self, tier: SizeTier, usage: UsageWindow) -> Optional[CostEstimate]:
        current, basis = self.current_cost(tier, usage)
        smaller = self.tiers.tier_below(tier)

        if (
            usage.avg_execution_time_seconds > self.config.long_running_query_seconds
            and usage.query_count < self.config.low_query_count
            and smaller is not None
        ):
            if basis == COST_BASIS_CREDITS:
                recommended = current * smaller.cost_multiplier / tier.cost_multiplier
            else:
                recommended = self._execution_cost(smaller, usage)
            return CostEstimate(
                resource_name=usage.resource_name,
                current_tier=tier,
                current_cost_usd=current,
                recommended_tier=smaller,
                recommended_cost_usd=recommended,
                rationale=f"Downsize from {tier.name} to {smaller.name}",
                cost_basis=basis,
                estimated_avg_execution_time_seconds=(
                    usage.avg_execution_time_seconds * (1 + self.config.downsize_latency_factor)
                ),
            )

        if usage.query_count < self.config.idle_query_count:
            return CostEstimate(
                resource_name=usage.resource_name,
                current_tier=tier,
                current_cost_usd=current,
                recommended_tier=None,
                recommended_cost_usd=current * self.config.idle_cost_factor,
                rationale=AUTO_SUSPEND_RATIONALE,
                cost_basis=basis,
                estimated_avg_execution_time_seconds=usage.avg_execution_time_seconds,
            )

        return None

    def rank(self, estimates: Iterable[CostEstimate]) -> List[CostEstimate]:
        """Keep the most valuable recommendations.

        Drops warehouses costing less than ``min_cost_usd``, orders the rest
        by savings (largest first, ties keep input order) and keeps the top
        ``top_recommendations``.
        """
        eligible = [e for e in estimates if e.current_cost_usd >= self.config.min_cost_usd]
        eligible.sort(key=lambda e: e.savings_usd, reverse=True)
        return eligible[:self.config.top_recommendations]

    def recommend_fleet(
        self, pairs: Iterable[Tuple[Union[SizeTier, str], UsageWindow]]
    ) -> List[CostEstimate]:
        """Recommend for every ``(tier, usage)`` pair and rank the results."""
        estimates = []
        for tier, usage in pairs:
            estimate = self.recommend(tier, usage)
            if estimate is not None:
                estimates.append(estimate)

        ranked = self.rank(estimates)
        self.logger.info(
            "Fleet rightsizing complete",
            candidates=len(estimates),
            recommendations=len(ranked),
            total_savings_usd=FormatUtils.round_currency(sum(e.savings_usd for e in ranked)),
        )
        return ranked
