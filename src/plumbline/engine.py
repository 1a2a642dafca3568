"""Scoring engine facade.

Wires the rightsizing and quality components together from one
:class:`~plumbline.config.models.EngineConfig` and one clock. Collaborators
that fetch telemetry or metadata are passed to each call; the engine keeps
no connection state of its own.

Classes:
    ScoringEngine: Entry point used by the API layer

Example:
    >>> engine = ScoringEngine(EngineConfig.from_file("plumbline.yaml"))
    >>> estimates = engine.warehouse_recommendations(warehouses, telemetry, metering)
    >>> report = engine.fleet_quality(tables_source, columns_source)
"""

from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .adapters import credit_record_from_row, query_record_from_row, table_metadata_from_row
from .config.models import EngineConfig
from .core.protocols import (
    ColumnMetadataSource,
    CreditMeteringSource,
    QueryTelemetrySource,
    TableMetadataSource,
)
from .core.utils import Clock, DictUtils, utc_now
from .logging import get_factory, get_logger
from .quality import (
    FleetQualityAggregator,
    FleetQualityReport,
    TableHealthReport,
    TableHealthScorer,
    TableMetadata,
)
from .sizing import (
    CostEstimate,
    DailyUsage,
    RightsizingAdvisor,
    SizeTier,
    SizeTierTable,
    UsageAggregator,
    UsageWindow,
    parse_period,
)
from .sizing.tiers import DEFAULT_TIERS


class ScoringEngine:
    """Deterministic rightsizing and data-quality scoring.

    Attributes:
        config: Engine configuration
        clock: Time source for staleness and usage windows
        tiers: Warehouse size catalog
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        clock: Clock = utc_now,
        tiers: Optional[SizeTierTable] = None,
        configure_logging: bool = False,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Engine configuration (defaults reproduce the standard rules)
            clock: Callable returning the current time
            tiers: Size catalog override
            configure_logging: Apply ``config.logging`` to the global logger factory
        """
        self.config = config or EngineConfig()
        self.clock = clock
        self.tiers = tiers or DEFAULT_TIERS

        if configure_logging:
            get_factory().configure_from_config(self.config.logging)
        self.logger = get_logger("engine")

        self.usage = UsageAggregator(
            clock=clock,
            default_period_days=self.config.rightsizing.default_period_days,
        )
        self.advisor = RightsizingAdvisor(
            self.config.rightsizing,
            self.config.pricing,
            tiers=self.tiers,
        )
        self.scorer = TableHealthScorer(self.config.quality, clock=clock)
        self.fleet = FleetQualityAggregator(self.config.quality, self.config.performance)

    @classmethod
    def from_config_file(cls, path: Union[str, Path], **kwargs: Any) -> "ScoringEngine":
        return cls(EngineConfig.from_file(path), **kwargs)

    def recommend(self, tier: Union[SizeTier, str], usage: UsageWindow) -> Optional[CostEstimate]:
        return self.advisor.recommend(tier, usage)

    def score_table(self, table: TableMetadata) -> TableHealthReport:
        return self.scorer.score(table)

    def aggregate_fleet(self, reports: Sequence[TableHealthReport]) -> FleetQualityReport:
        return self.fleet.aggregate(reports)

    def warehouse_recommendations(
        self,
        warehouses: Iterable[Mapping[str, Any]],
        telemetry: QueryTelemetrySource,
        metering: Optional[CreditMeteringSource] = None,
        *,
        period: Union[str, int, None] = None,
    ) -> List[CostEstimate]:
        """Rank rightsizing recommendations across warehouses.

        Args:
            warehouses: Warehouse listing rows carrying ``name`` and ``size``
            telemetry: Source of query records
            metering: Source of the credit-metering series; without it
                costs are estimated from execution time
            period: Usage period such as ``"30days"``

        Returns:
            At most ``top_recommendations`` estimates, largest savings first.
            Warehouses without queries in the period are left out.
        """
        period_days = parse_period(period, default=self.config.rightsizing.default_period_days)
        now = self.clock()

        records = [query_record_from_row(r) for r in telemetry.fetch_query_records(period_days=period_days)]
        credits = None
        if metering is not None:
            credits = [credit_record_from_row(r) for r in metering.fetch_credit_usage(period_days=period_days)]

        windows = {
            w.resource_name: w
            for w in self.usage.aggregate(records, credits, period_days=period_days, now=now)
        }

        pairs = []
        for row in warehouses:
            data = DictUtils.normalize_keys(dict(row))
            name = str(DictUtils.pick(data, "name", "warehouse_name", "resource_name", default=""))
            window = windows.get(name)
            if window is None:
                self.logger.debug("No usage in period, skipping warehouse", warehouse=name, period_days=period_days)
                continue
            pairs.append((self.tiers.resolve(DictUtils.pick(data, "size", "warehouse_size")), window))

        return self.advisor.recommend_fleet(pairs)

    def usage_breakdown(
        self,
        resource_name: str,
        telemetry: QueryTelemetrySource,
        metering: Optional[CreditMeteringSource] = None,
        *,
        period: Union[str, int, None] = None,
    ) -> List[DailyUsage]:
        """Daily usage series of one warehouse over the period."""
        period_days = parse_period(period, default=self.config.rightsizing.default_period_days)
        records = [query_record_from_row(r) for r in telemetry.fetch_query_records(period_days=period_days)]
        credits = None
        if metering is not None:
            credits = [credit_record_from_row(r) for r in metering.fetch_credit_usage(period_days=period_days)]

        return self.usage.daily_breakdown(
            resource_name,
            records,
            credits,
            period_days=period_days,
            now=self.clock(),
            credit_unit_price=self.config.pricing.credit_unit_price,
        )

    def fleet_quality(
        self,
        metadata_source: TableMetadataSource,
        columns_source: ColumnMetadataSource,
        sample_size: Optional[int] = None,
    ) -> FleetQualityReport:
        """Score a sample of tables and roll them up into a fleet report."""
        listing = self.fleet.sample(list(metadata_source.list_tables()), sample_size)

        tables = []
        for row in listing:
            table_name = str(DictUtils.pick(DictUtils.normalize_keys(dict(row)), "table_name", "name", default=""))
            tables.append(table_metadata_from_row(row, columns_source.column_stats(table_name)))

        reports = self.fleet.evaluate(tables, self.scorer)
        return self.fleet.aggregate(reports)

    def __repr__(self) -> str:
        return f"ScoringEngine(environment={self.config.environment!r}, tiers={len(self.tiers)})"
