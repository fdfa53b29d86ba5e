"""Business metrics aggregation."""

from fieldmap.metrics.aggregator import MetricsAggregator, aggregate, store_rating
from fieldmap.metrics.model import (
    CategoryPerformance,
    CustomerMetrics,
    CustomerSegment,
    Diagnostics,
    GrowthRates,
    InventoryMetrics,
    MarketingMetrics,
    Metrics,
    PaymentMethodShare,
    PeriodRevenue,
    ProductPerformance,
    StorePerformance,
)

__all__ = [
    "CategoryPerformance",
    "CustomerMetrics",
    "CustomerSegment",
    "Diagnostics",
    "GrowthRates",
    "InventoryMetrics",
    "MarketingMetrics",
    "Metrics",
    "MetricsAggregator",
    "PaymentMethodShare",
    "PeriodRevenue",
    "ProductPerformance",
    "StorePerformance",
    "aggregate",
    "store_rating",
]
