"""Data models for aggregated business metrics."""

from dataclasses import asdict, dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class GrowthRates:
    """Revenue growth of the latest period over the one before, as fractions"""

    monthly: float = 0.0
    quarterly: float = 0.0
    yearly: float = 0.0


@dataclass(frozen=True)
class InventoryMetrics:
    active_products: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    total_units: float = 0.0


@dataclass(frozen=True)
class CustomerSegment:
    name: str
    customers: int
    revenue: float


@dataclass(frozen=True)
class CustomerMetrics:
    total: int = 0
    new: int = 0
    retention: float = 0.0  # fraction of customers with more than one transaction
    lifetime_value: float = 0.0
    segments: Tuple[CustomerSegment, ...] = ()


@dataclass(frozen=True)
class PeriodRevenue:
    period: str  # "2024-01"
    revenue: float
    transactions: int


@dataclass(frozen=True)
class ProductPerformance:
    product: str
    revenue: float
    quantity: float
    profit: float
    category: Optional[str] = None


@dataclass(frozen=True)
class CategoryPerformance:
    category: str
    revenue: float
    quantity: float
    products: int


@dataclass(frozen=True)
class StorePerformance:
    store: str
    revenue: float
    transactions: int
    avg_order_value: float
    rating: str


@dataclass(frozen=True)
class MarketingMetrics:
    active_campaigns: int = 0
    ad_spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    conversions: float = 0.0
    click_through_rate: float = 0.0
    conversion_rate: float = 0.0
    return_on_ad_spend: float = 0.0


@dataclass(frozen=True)
class PaymentMethodShare:
    method: str
    transactions: int
    share: float


@dataclass(frozen=True)
class Diagnostics:
    """What the aggregation could not use"""

    missing_cells: Dict[str, int] = field(default_factory=dict)  # field id -> empty cells
    skipped_cells: Dict[str, int] = field(default_factory=dict)  # field id -> unparseable cells
    unmapped_columns: Tuple[str, ...] = ()
    notices: Tuple[str, ...] = ()

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped_cells.values())


@dataclass(frozen=True)
class Metrics:
    """Headline KPIs and breakdowns for a processed dataset"""

    total_revenue: float = 0.0
    total_profit: float = 0.0
    total_transactions: int = 0
    avg_order_value: float = 0.0
    profit_margin: float = 0.0  # fraction
    growth_rates: GrowthRates = field(default_factory=GrowthRates)
    inventory: InventoryMetrics = field(default_factory=InventoryMetrics)
    customers: CustomerMetrics = field(default_factory=CustomerMetrics)
    revenue_trend: Tuple[PeriodRevenue, ...] = ()
    product_performance: Tuple[ProductPerformance, ...] = ()
    category_performance: Tuple[CategoryPerformance, ...] = ()
    store_performance: Tuple[StorePerformance, ...] = ()
    marketing: MarketingMetrics = field(default_factory=MarketingMetrics)
    payment_methods: Tuple[PaymentMethodShare, ...] = ()
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    is_empty: bool = False

    @classmethod
    def empty(cls, notice: str, unmapped_columns: Tuple[str, ...] = ()) -> "Metrics":
        """All-zero metrics for a dataset with no rows or columns."""
        return cls(
            diagnostics=Diagnostics(unmapped_columns=unmapped_columns, notices=(notice,)),
            is_empty=True,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary (JSON-compatible)"""
        result = asdict(self)
        result["diagnostics"]["total_skipped"] = self.diagnostics.total_skipped
        return result
