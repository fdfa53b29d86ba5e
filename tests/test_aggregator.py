"""
Metrics Aggregator Tests
========================
"""

import math

import pytest

from fieldmap.constants import NO_DATA_NOTICE
from fieldmap.metrics import Metrics, MetricsAggregator, store_rating


@pytest.fixture
def aggregator() -> MetricsAggregator:
    return MetricsAggregator(low_stock_threshold=10)


def _no_nan(value):
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, dict):
        return all(_no_nan(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return all(_no_nan(v) for v in value)
    return True


class TestHeadlineMetrics:
    def test_sales_totals(self, aggregator, sales_dataset):
        metrics = aggregator.aggregate(sales_dataset)

        assert metrics.total_revenue == pytest.approx(575.75)
        assert metrics.total_transactions == 5
        assert metrics.avg_order_value == pytest.approx(115.15)
        assert metrics.total_profit == 0.0
        assert metrics.profit_margin == 0.0
        assert not metrics.is_empty

    def test_unparseable_cells_reported(self, aggregator, sales_dataset):
        metrics = aggregator.aggregate(sales_dataset)
        assert metrics.diagnostics.skipped_cells == {"total_amount": 1}
        assert metrics.diagnostics.total_skipped == 1

    def test_monthly_growth(self, aggregator, sales_dataset):
        growth = aggregator.aggregate(sales_dataset).growth_rates
        # Feb 225.25 vs Jan 350.50
        assert growth.monthly == pytest.approx(-0.3573, abs=1e-4)
        assert growth.quarterly == 0.0
        assert growth.yearly == 0.0

    def test_revenue_trend(self, aggregator, sales_dataset):
        trend = aggregator.aggregate(sales_dataset).revenue_trend
        assert [p.period for p in trend] == ["2024-01", "2024-02"]
        assert trend[0].revenue == pytest.approx(350.5)
        assert trend[1].revenue == pytest.approx(225.25)
        assert [p.transactions for p in trend] == [2, 3]

    def test_deterministic(self, aggregator, sales_dataset):
        assert aggregator.aggregate(sales_dataset) == aggregator.aggregate(sales_dataset)

    def test_no_nan_in_output(self, aggregator, sales_dataset):
        assert _no_nan(aggregator.aggregate(sales_dataset).to_dict())

    def test_profit_from_cost(self, aggregator, make_dataset):
        dataset = make_dataset(
            [{"Revenue": "100", "Cost": "60"}, {"Revenue": "50", "Cost": "20"}],
            {"Revenue": "revenue", "Cost": "cost"},
        )
        metrics = aggregator.aggregate(dataset)
        assert metrics.total_profit == pytest.approx(70.0)
        assert metrics.profit_margin == pytest.approx(0.4667, abs=1e-4)

    def test_margin_is_zero_when_revenue_is_zero(self, aggregator, make_dataset):
        dataset = make_dataset(
            [{"Revenue": "0", "Profit": "25"}, {"Revenue": "0", "Profit": "5"}],
            {"Revenue": "revenue", "Profit": "profit"},
        )
        metrics = aggregator.aggregate(dataset)
        assert metrics.total_revenue == 0.0
        assert metrics.total_profit == pytest.approx(30.0)
        assert metrics.profit_margin == 0.0

    def test_revenue_derived_from_price_and_quantity(self, aggregator, make_dataset):
        dataset = make_dataset(
            [{"Price": "10", "Qty": "2"}, {"Price": "5", "Qty": "4"}],
            {"Price": "unit_price", "Qty": "quantity"},
        )
        metrics = aggregator.aggregate(dataset)
        assert metrics.total_revenue == pytest.approx(40.0)
        assert any("unit price" in n for n in metrics.diagnostics.notices)

    def test_no_revenue_field(self, aggregator, make_dataset):
        dataset = make_dataset([{"Name": "x"}], {"Name": "customer_name"})
        metrics = aggregator.aggregate(dataset)
        assert metrics.total_revenue == 0.0
        assert metrics.avg_order_value == 0.0
        assert metrics.total_transactions == 1

    def test_yearly_growth(self, aggregator, make_dataset):
        dataset = make_dataset(
            [{"Date": "2023-06-01", "Revenue": "100"}, {"Date": "2024-03-01", "Revenue": "150"}],
            {"Date": "order_date", "Revenue": "revenue"},
        )
        growth = aggregator.aggregate(dataset).growth_rates
        assert growth.yearly == pytest.approx(0.5)
        assert growth.monthly == 0.0
        assert growth.quarterly == 0.0


class TestEmptyDataset:
    def test_empty_rows(self, aggregator, make_dataset):
        metrics = aggregator.aggregate(make_dataset([], {"Revenue": "revenue"}))
        assert metrics.is_empty
        assert metrics.total_revenue == 0.0
        assert metrics.total_transactions == 0
        assert NO_DATA_NOTICE in metrics.diagnostics.notices

    def test_empty_metrics_factory(self):
        metrics = Metrics.empty(NO_DATA_NOTICE)
        assert metrics.to_dict()["diagnostics"]["notices"] == (NO_DATA_NOTICE,)


class TestBreakdowns:
    def test_customers(self, aggregator, sales_dataset):
        customers = aggregator.aggregate(sales_dataset).customers
        assert customers.total == 3
        assert customers.new == 1  # C003 first bought in the latest month
        assert customers.retention == pytest.approx(0.6667, abs=1e-4)
        assert customers.lifetime_value == pytest.approx(191.92)
        segments = {s.name: s.customers for s in customers.segments}
        assert segments == {"VIP": 0, "High Value": 0, "Regular": 2, "New": 1}

    def test_products(self, aggregator, sales_dataset):
        products = aggregator.aggregate(sales_dataset).product_performance
        assert [p.product for p in products] == ["Gadget", "Widget", "Gizmo"]
        widget = products[1]
        assert widget.revenue == pytest.approx(250.0)
        assert widget.quantity == pytest.approx(5.0)
        assert widget.category == "Hardware"

    def test_categories(self, aggregator, sales_dataset):
        categories = aggregator.aggregate(sales_dataset).category_performance
        assert [c.category for c in categories] == ["Electronics", "Hardware"]
        assert categories[0].revenue == pytest.approx(325.75)
        assert categories[0].products == 2

    def test_stores(self, aggregator, sales_dataset):
        stores = aggregator.aggregate(sales_dataset).store_performance
        assert [s.store for s in stores] == ["Uptown", "Downtown"]
        assert stores[0].transactions == 2
        assert stores[0].rating == "Average"
        assert stores[1].rating == "Below Average"

    def test_payment_methods(self, aggregator, sales_dataset):
        payments = aggregator.aggregate(sales_dataset).payment_methods
        assert [(p.method, p.transactions) for p in payments] == [("Card", 3), ("Cash", 2)]
        assert payments[0].share == pytest.approx(0.6)

    def test_inventory(self, aggregator, make_dataset):
        rows = [
            {"SKU": "A", "Stock": "20"},
            {"SKU": "B", "Stock": "5"},
            {"SKU": "C", "Stock": "50"},
            {"SKU": "A", "Stock": "0"},
        ]
        inventory = aggregator.aggregate(make_dataset(rows, {"SKU": "sku", "Stock": "stock_level"})).inventory
        assert inventory.active_products == 3
        assert inventory.out_of_stock == 1
        assert inventory.low_stock == 1
        assert inventory.total_units == pytest.approx(55.0)

    def test_inventory_uses_reorder_point(self, aggregator, make_dataset):
        rows = [{"SKU": "C", "Stock": "50", "Reorder": "60"}]
        dataset = make_dataset(rows, {"SKU": "sku", "Stock": "stock_level", "Reorder": "reorder_point"})
        assert aggregator.aggregate(dataset).inventory.low_stock == 1

    def test_marketing(self, aggregator, make_dataset):
        rows = [
            {"Campaign": "C1", "Spend": "100", "Impr": "1000", "Clicks": "50", "Conv": "5", "Revenue": "400"},
            {"Campaign": "C2", "Spend": "100", "Impr": "1000", "Clicks": "30", "Conv": "3", "Revenue": "200"},
        ]
        dataset = make_dataset(rows, {
            "Campaign": "campaign_id", "Spend": "ad_spend", "Impr": "impressions",
            "Clicks": "clicks", "Conv": "conversions", "Revenue": "revenue",
        })
        marketing = aggregator.aggregate(dataset).marketing
        assert marketing.active_campaigns == 2
        assert marketing.ad_spend == pytest.approx(200.0)
        assert marketing.click_through_rate == pytest.approx(0.04)
        assert marketing.conversion_rate == pytest.approx(0.1)
        assert marketing.return_on_ad_spend == pytest.approx(3.0)


@pytest.mark.parametrize("aov,rating", [
    (250.0, "Excellent"),
    (200.0, "Good"),
    (170.0, "Average"),
    (160.0, "Below Average"),
])
def test_store_rating(aov, rating):
    assert store_rating(aov) == rating
