"""
Metrics Aggregator

Computes KPIs and breakdowns from a processed dataset. Every number is
derived from mapped, normalized cell values; a metric whose inputs are not
mapped is reported as zero and a notice is added to the diagnostics.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

import pandas as pd

from fieldmap.config import get_config
from fieldmap.constants import NO_DATA_NOTICE
from fieldmap.dataset import NormalizedColumn, ProcessedDataset
from fieldmap.exceptions import EmptyDatasetError
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

logger = logging.getLogger(__name__)

# Role -> catalog fields that can fill it, in order of preference
ROLE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "revenue": ("revenue", "total_amount", "net_revenue", "gross_revenue", "subtotal"),
    "profit": ("profit", "net_profit", "gross_profit"),
    "cost": ("cost", "cost_of_goods_sold"),
    "unit_cost": ("unit_cost",),
    "unit_price": ("unit_price", "list_price"),
    "quantity": ("quantity",),
    "date": ("order_date", "transaction_date", "date", "timestamp", "created_date", "ship_date"),
    "transaction": ("transaction_id", "order_id", "invoice_number"),
    "customer": ("customer_id", "customer_email", "customer_name"),
    "product": ("product_id", "sku", "product_name"),
    "product_label": ("product_name", "product_id", "sku"),
    "category": ("product_category", "product_subcategory"),
    "stock": ("stock_level",),
    "reorder_point": ("reorder_point", "safety_stock"),
    "store": ("store_name", "store_id"),
    "campaign": ("campaign_id", "campaign_name"),
    "ad_spend": ("ad_spend",),
    "impressions": ("impressions",),
    "clicks": ("clicks",),
    "conversions": ("conversions",),
    "payment_method": ("payment_method",),
}

NUMERIC_ROLES = {
    "revenue", "profit", "cost", "unit_cost", "unit_price", "quantity", "stock",
    "reorder_point", "ad_spend", "impressions", "clicks", "conversions",
}
DATE_ROLES = {"date"}

# (segment, lower bound inclusive, upper bound exclusive) on customer revenue
CUSTOMER_SEGMENTS = (
    ("VIP", 5000.0, None),
    ("High Value", 1000.0, 5000.0),
    ("Regular", 100.0, 1000.0),
    ("New", None, 100.0),
)

# (rating, average order value strictly above)
STORE_RATINGS = (
    ("Excellent", 200.0),
    ("Good", 180.0),
    ("Average", 160.0),
)
DEFAULT_STORE_RATING = "Below Average"

TOP_PRODUCTS = 20


def _money(value) -> float:
    value = float(value)
    return round(value, 2) if math.isfinite(value) else 0.0


def _quantity(value) -> float:
    value = float(value)
    return round(value, 4) if math.isfinite(value) else 0.0


def _ratio(numerator, denominator) -> float:
    """Safe division rounded to 4 places; 0.0 when the denominator is zero."""
    numerator, denominator = float(numerator), float(denominator)
    if not denominator or not math.isfinite(denominator) or not math.isfinite(numerator):
        return 0.0
    return round(numerator / denominator, 4)


def store_rating(avg_order_value: float) -> str:
    """Rate a store by average order value."""
    for rating, floor in STORE_RATINGS:
        if avg_order_value > floor:
            return rating
    return DEFAULT_STORE_RATING


class MetricsAggregator:
    """Aggregates a ProcessedDataset into Metrics"""

    def __init__(self, low_stock_threshold: Optional[float] = None):
        """
        Initialize the aggregator.

        Args:
            low_stock_threshold: Stock level at or below which a product is
                low on stock when no reorder point is mapped
        """
        self.low_stock_threshold = (
            low_stock_threshold if low_stock_threshold is not None else get_config().low_stock_threshold
        )

    def aggregate(self, dataset: ProcessedDataset) -> Metrics:
        """
        Compute metrics for a dataset.

        Pure: the same dataset always yields equal Metrics.

        Args:
            dataset: Processed dataset

        Returns:
            Metrics; all-zero with is_empty=True when the dataset has no rows
        """
        try:
            self._ensure_not_empty(dataset)
        except EmptyDatasetError as e:
            logger.warning(f"{e}: reporting empty metrics")
            return Metrics.empty(NO_DATA_NOTICE, dataset.unmapped_columns())

        frame, normalized = self._build_frame(dataset)
        notices: List[str] = []

        frame["_revenue"] = self._revenue_series(frame, notices)
        frame["_profit"] = self._profit_series(frame, notices)
        if "date" not in frame:
            notices.append("No date field mapped: growth rates and trends unavailable")

        total_revenue = _money(frame["_revenue"].sum())
        total_profit = _money(frame["_profit"].sum())
        total_transactions = self._count_transactions(frame)

        metrics = Metrics(
            total_revenue=total_revenue,
            total_profit=total_profit,
            total_transactions=total_transactions,
            avg_order_value=_money(_ratio(total_revenue, total_transactions)),
            profit_margin=_ratio(total_profit, total_revenue),
            growth_rates=self._growth_rates(frame),
            inventory=self._inventory(frame),
            customers=self._customers(frame, total_revenue),
            revenue_trend=self._revenue_trend(frame),
            product_performance=self._product_performance(frame),
            category_performance=self._category_performance(frame),
            store_performance=self._store_performance(frame),
            marketing=self._marketing(frame, total_revenue),
            payment_methods=self._payment_methods(frame),
            diagnostics=Diagnostics(
                missing_cells={c.field_id: c.missing for c in normalized.values() if c.missing},
                skipped_cells={c.field_id: c.skipped for c in normalized.values() if c.skipped},
                unmapped_columns=dataset.unmapped_columns(),
                notices=tuple(notices),
            ),
        )

        logger.info(
            f"Aggregated {dataset.row_count} rows from {dataset.file_name}: "
            f"revenue={metrics.total_revenue}, transactions={metrics.total_transactions}, "
            f"skipped cells={metrics.diagnostics.total_skipped}"
        )
        return metrics

    @staticmethod
    def _ensure_not_empty(dataset: ProcessedDataset) -> None:
        if dataset.row_count == 0:
            raise EmptyDatasetError(f"Dataset {dataset.file_name!r} has no rows")
        if not dataset.columns:
            raise EmptyDatasetError(f"Dataset {dataset.file_name!r} has no columns")

    @staticmethod
    def _build_frame(dataset: ProcessedDataset) -> Tuple[pd.DataFrame, Dict[str, NormalizedColumn]]:
        """One column per filled role, holding normalized values."""
        frame = pd.DataFrame(index=pd.RangeIndex(dataset.row_count))
        normalized: Dict[str, NormalizedColumn] = {}
        mapped = dataset.mapped_fields()

        for role, field_ids in ROLE_FIELDS.items():
            field_id = next((f for f in field_ids if f in mapped and f in dataset.catalog), None)
            if field_id is None:
                continue
            if field_id not in normalized:
                normalized[field_id] = dataset.normalized_column(field_id)
            values = list(normalized[field_id].values)

            if role in NUMERIC_ROLES:
                frame[role] = pd.Series(values, dtype="float64")
            elif role in DATE_ROLES:
                frame[role] = pd.to_datetime(pd.Series(values, dtype=object))
            else:
                frame[role] = pd.Series(values, dtype=object)

        return frame, normalized

    @staticmethod
    def _revenue_series(frame: pd.DataFrame, notices: List[str]) -> pd.Series:
        if "revenue" in frame:
            return frame["revenue"]
        if "unit_price" in frame and "quantity" in frame:
            notices.append("Revenue derived from unit price times quantity")
            return frame["unit_price"] * frame["quantity"]
        notices.append("No revenue field mapped: revenue reported as 0")
        return pd.Series(float("nan"), index=frame.index)

    @staticmethod
    def _profit_series(frame: pd.DataFrame, notices: List[str]) -> pd.Series:
        if "profit" in frame:
            return frame["profit"]
        if "cost" in frame:
            return frame["_revenue"] - frame["cost"]
        if "unit_cost" in frame and "quantity" in frame:
            return frame["_revenue"] - frame["unit_cost"] * frame["quantity"]
        notices.append("No profit or cost field mapped: profit reported as 0")
        return pd.Series(float("nan"), index=frame.index)

    @staticmethod
    def _count_transactions(frame: pd.DataFrame) -> int:
        """Distinct transaction ids when mapped, otherwise one per row."""
        if "transaction" in frame:
            return int(frame["transaction"].nunique())
        return int(len(frame))

    @staticmethod
    def _growth(frame: pd.DataFrame, freq: str) -> float:
        dated = frame.dropna(subset=["date"])
        if dated.empty:
            return 0.0
        totals = dated.groupby(dated["date"].dt.to_period(freq))["_revenue"].sum()
        latest = totals.index.max()
        previous = latest - 1
        if previous not in totals.index:
            return 0.0
        base = totals[previous]
        return _ratio(totals[latest] - base, base)

    def _growth_rates(self, frame: pd.DataFrame) -> GrowthRates:
        if "date" not in frame:
            return GrowthRates()
        return GrowthRates(
            monthly=self._growth(frame, "M"),
            quarterly=self._growth(frame, "Q"),
            yearly=self._growth(frame, "Y"),
        )

    def _revenue_trend(self, frame: pd.DataFrame) -> Tuple[PeriodRevenue, ...]:
        if "date" not in frame:
            return ()
        dated = frame.dropna(subset=["date"])
        trend = []
        for period, group in dated.groupby(dated["date"].dt.to_period("M"), sort=True):
            trend.append(
                PeriodRevenue(
                    period=str(period),
                    revenue=_money(group["_revenue"].sum()),
                    transactions=self._count_transactions(group),
                )
            )
        return tuple(trend)

    def _inventory(self, frame: pd.DataFrame) -> InventoryMetrics:
        active = int(frame["product"].nunique()) if "product" in frame else 0
        if "stock" not in frame:
            return InventoryMetrics(active_products=active)

        columns = ["stock"] + (["reorder_point"] if "reorder_point" in frame else [])
        stocked = frame.dropna(subset=["stock"])
        if "product" in frame:
            # Latest stock reading per product
            latest = stocked.groupby("product", sort=True)[columns].last()
        else:
            latest = stocked[columns]
            active = int((latest["stock"] > 0).sum())

        if "reorder_point" in latest:
            threshold = latest["reorder_point"].fillna(self.low_stock_threshold)
        else:
            threshold = self.low_stock_threshold

        return InventoryMetrics(
            active_products=active,
            low_stock=int(((latest["stock"] > 0) & (latest["stock"] <= threshold)).sum()),
            out_of_stock=int((latest["stock"] <= 0).sum()),
            total_units=_quantity(latest["stock"].sum()),
        )

    def _customers(self, frame: pd.DataFrame, total_revenue: float) -> CustomerMetrics:
        if "customer" not in frame:
            return CustomerMetrics()
        known = frame.dropna(subset=["customer"])
        total = int(known["customer"].nunique())
        if not total:
            return CustomerMetrics()

        grouped = known.groupby("customer", sort=True)
        revenue_by_customer = grouped["_revenue"].sum()
        if "transaction" in known:
            purchases = grouped["transaction"].nunique()
        else:
            purchases = grouped.size()
        repeat = int((purchases > 1).sum())

        new = 0
        if "date" in known:
            dated = known.dropna(subset=["date"])
            if not dated.empty:
                latest_month = dated["date"].max().to_period("M")
                first_purchase = dated.groupby("customer")["date"].min().dt.to_period("M")
                new = int((first_purchase == latest_month).sum())

        segments = []
        for name, lower, upper in CUSTOMER_SEGMENTS:
            in_segment = pd.Series(True, index=revenue_by_customer.index)
            if lower is not None:
                in_segment &= revenue_by_customer >= lower
            if upper is not None:
                in_segment &= revenue_by_customer < upper
            segments.append(
                CustomerSegment(
                    name=name,
                    customers=int(in_segment.sum()),
                    revenue=_money(revenue_by_customer[in_segment].sum()),
                )
            )

        return CustomerMetrics(
            total=total,
            new=new,
            retention=_ratio(repeat, total),
            lifetime_value=_money(_ratio(total_revenue, total)),
            segments=tuple(segments),
        )

    def _product_performance(self, frame: pd.DataFrame) -> Tuple[ProductPerformance, ...]:
        if "product_label" not in frame:
            return ()
        grouped = frame.dropna(subset=["product_label"]).groupby("product_label", sort=True)
        revenue = grouped["_revenue"].sum()
        profit = grouped["_profit"].sum()
        quantity = grouped["quantity"].sum() if "quantity" in frame else None
        category = grouped["category"].first() if "category" in frame else None

        products = [
            ProductPerformance(
                product=str(label),
                revenue=_money(revenue[label]),
                quantity=_quantity(quantity[label]) if quantity is not None else 0.0,
                profit=_money(profit[label]),
                category=category[label] if category is not None and pd.notna(category[label]) else None,
            )
            for label in revenue.index
        ]
        products.sort(key=lambda p: (-p.revenue, p.product))
        return tuple(products[:TOP_PRODUCTS])

    @staticmethod
    def _category_performance(frame: pd.DataFrame) -> Tuple[CategoryPerformance, ...]:
        if "category" not in frame:
            return ()
        grouped = frame.dropna(subset=["category"]).groupby("category", sort=True)
        revenue = grouped["_revenue"].sum()
        quantity = grouped["quantity"].sum() if "quantity" in frame else None
        products = grouped["product"].nunique() if "product" in frame else grouped.size()

        categories = [
            CategoryPerformance(
                category=str(name),
                revenue=_money(revenue[name]),
                quantity=_quantity(quantity[name]) if quantity is not None else 0.0,
                products=int(products[name]),
            )
            for name in revenue.index
        ]
        categories.sort(key=lambda c: (-c.revenue, c.category))
        return tuple(categories)

    def _store_performance(self, frame: pd.DataFrame) -> Tuple[StorePerformance, ...]:
        if "store" not in frame:
            return ()
        stores = []
        for name, group in frame.dropna(subset=["store"]).groupby("store", sort=True):
            revenue = _money(group["_revenue"].sum())
            transactions = self._count_transactions(group)
            avg_order_value = _money(_ratio(revenue, transactions))
            stores.append(
                StorePerformance(
                    store=str(name),
                    revenue=revenue,
                    transactions=transactions,
                    avg_order_value=avg_order_value,
                    rating=store_rating(avg_order_value),
                )
            )
        stores.sort(key=lambda s: (-s.revenue, s.store))
        return tuple(stores)

    @staticmethod
    def _marketing(frame: pd.DataFrame, total_revenue: float) -> MarketingMetrics:
        def total(role: str) -> float:
            return _quantity(frame[role].sum()) if role in frame else 0.0

        if not any(role in frame for role in ("campaign", "ad_spend", "impressions", "clicks", "conversions")):
            return MarketingMetrics()

        ad_spend = _money(total("ad_spend"))
        impressions = total("impressions")
        clicks = total("clicks")
        conversions = total("conversions")
        return MarketingMetrics(
            active_campaigns=int(frame["campaign"].nunique()) if "campaign" in frame else 0,
            ad_spend=ad_spend,
            impressions=impressions,
            clicks=clicks,
            conversions=conversions,
            click_through_rate=_ratio(clicks, impressions),
            conversion_rate=_ratio(conversions, clicks),
            return_on_ad_spend=_ratio(total_revenue, ad_spend),
        )

    @staticmethod
    def _payment_methods(frame: pd.DataFrame) -> Tuple[PaymentMethodShare, ...]:
        if "payment_method" not in frame:
            return ()
        counts = frame["payment_method"].dropna().value_counts()
        total = int(counts.sum())
        shares = [
            PaymentMethodShare(method=str(method), transactions=int(count), share=_ratio(count, total))
            for method, count in counts.items()
        ]
        shares.sort(key=lambda s: (-s.transactions, s.method))
        return tuple(shares)


def aggregate(dataset: ProcessedDataset) -> Metrics:
    """Aggregate a dataset with the configured defaults."""
    return MetricsAggregator().aggregate(dataset)
