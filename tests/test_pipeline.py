"""
Mapping Pipeline Tests
======================
"""

import pytest

from fieldmap.dataset import ProcessedDataset
from fieldmap.mapping.resolver import validate_bijection
from fieldmap.pipeline import MappingPipeline, collect_columns


EXPECTED_FIELDS = {
    "Order ID": "order_id",
    "Order Date": "order_date",
    "Customer ID": "customer_id",
    "Product Name": "product_name",
    "Category": "product_category",
    "Quantity": "quantity",
    "Total Amount": "total_amount",
    "Store Name": "store_name",
    "Payment Method": "payment_method",
}

class TestCollectColumns:
    def test_union_in_first_seen_order(self):
        rows = [{"a": 1, "b": 2}, {"c": 3, "a": 4}]
        assert collect_columns(rows) == ["a", "b", "c"]

    def test_explicit_header_wins(self):
        assert collect_columns([{"a": 1}], ["b", "a", "b"]) == ["b", "a"]

class TestMappingPipeline:
    def test_process_maps_every_column(self, sales_dataset, sales_columns):
        assert isinstance(sales_dataset, ProcessedDataset)
        assert sales_dataset.columns == tuple(sales_columns)
        assert len(sales_dataset.mappings) == len(sales_columns)
        assert {m.source_column: m.business_field for m in sales_dataset.mappings} == EXPECTED_FIELDS
        validate_bijection(sales_dataset.mappings)

    def test_samples_skip_empty_cells(self, pipeline):
        rows = [{"Revenue": ""}, {"Revenue": None}, {"Revenue": "$5"}]
        (column,) = pipeline.build_raw_columns(rows)
        assert column.sample_values == ("$5",)

    def test_parallel_matches_sequential(self, catalog, sales_rows, sales_columns, sales_dataset):
        parallel = MappingPipeline(catalog=catalog, max_workers=4)
        assert parallel.process("sales.csv", sales_rows, sales_columns).mappings == sales_dataset.mappings

    def test_rows_are_copied(self, pipeline, sales_rows, sales_columns):
        dataset = pipeline.process("sales.csv", sales_rows, sales_columns)
        sales_rows[0]["Total Amount"] = "$999"
        assert dataset.data[0]["Total Amount"] == "$100.00"

    def test_values_for(self, sales_dataset):
        assert sales_dataset.values_for("total_amount") == [100.0, 250.5, 150.0, 75.25]
        assert sales_dataset.values_for("ad_spend") == []
        normalized = sales_dataset.normalized_column("total_amount")
        assert normalized.skipped == 1
        assert normalized.values[4] is None

    def test_percentage_column_uses_one_scale(self, make_dataset):
        rows = [{"Margin": "1"}, {"Margin": "2"}, {"Margin": "12.5"}]
        dataset = make_dataset(rows, {"Margin": "profit_margin"})
        assert dataset.values_for("profit_margin") == pytest.approx([0.01, 0.02, 0.125])

    def test_fractional_percentage_column_kept(self, make_dataset):
        rows = [{"Margin": "0.2"}, {"Margin": "1"}]
        dataset = make_dataset(rows, {"Margin": "profit_margin"})
        assert dataset.values_for("profit_margin") == pytest.approx([0.2, 1.0])
