"""
Pytest Configuration and Fixtures
==================================
Shared fixtures for the field mapping test suite.
"""

import os
import sys
from typing import Dict, List

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fieldmap.catalog import FieldCatalog, get_default_catalog, make_field
from fieldmap.dataset import ProcessedDataset
from fieldmap.mapping.model import ColumnMapping
from fieldmap.pipeline import MappingPipeline


# =============================================================================
# CATALOG FIXTURES
# =============================================================================

@pytest.fixture
def catalog() -> FieldCatalog:
    """The packaged field catalog."""
    return get_default_catalog()


@pytest.fixture
def small_catalog() -> FieldCatalog:
    """A tiny catalog for resolver and classifier edge cases."""
    return FieldCatalog([
        make_field("revenue", "Revenue", "financial", "currency", aliases=["sales"], keywords=["revenue"]),
        make_field("total_amount", "Total Amount", "financial", "currency", aliases=["amount", "total"]),
        make_field("order_date", "Order Date", "sales", "date", aliases=["date"], keywords=["date"]),
        make_field("customer_id", "Customer ID", "customer", "identifier", aliases=["customer"]),
    ])


# =============================================================================
# DATA FIXTURES
# =============================================================================

SALES_COLUMNS = [
    "Order ID", "Order Date", "Customer ID", "Product Name", "Category",
    "Quantity", "Total Amount", "Store Name", "Payment Method",
]


@pytest.fixture
def sales_columns() -> List[str]:
    return list(SALES_COLUMNS)


@pytest.fixture
def sales_rows() -> List[Dict[str, str]]:
    """Five orders over two months, one with an unparseable amount."""
    values = [
        ("O-1001", "2024-01-05", "C001", "Widget", "Hardware", "2", "$100.00", "Downtown", "Card"),
        ("O-1002", "2024-01-20", "C002", "Gadget", "Electronics", "1", "$250.50", "Uptown", "Cash"),
        ("O-1003", "2024-02-03", "C001", "Widget", "Hardware", "3", "$150.00", "Downtown", "Card"),
        ("O-1004", "2024-02-14", "C003", "Gizmo", "Electronics", "1", "$75.25", "Uptown", "Card"),
        ("O-1005", "2024-02-28", "C002", "Gadget", "Electronics", "2", "n/a", "Downtown", "Cash"),
    ]
    return [dict(zip(SALES_COLUMNS, row)) for row in values]


@pytest.fixture
def sales_csv(sales_rows) -> bytes:
    """The sales rows as CSV bytes."""
    lines = [",".join(SALES_COLUMNS)]
    lines += [",".join(row[c] for c in SALES_COLUMNS) for row in sales_rows]
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def pipeline(catalog) -> MappingPipeline:
    return MappingPipeline(catalog=catalog, max_workers=1)


@pytest.fixture
def sales_dataset(pipeline, sales_rows, sales_columns) -> ProcessedDataset:
    return pipeline.process("sales.csv", sales_rows, sales_columns)


@pytest.fixture
def make_dataset(catalog):
    """Build a dataset with an explicit column -> field mapping (None = unmapped)."""

    def _make(rows, mapping: Dict[str, str], file_name: str = "test.csv") -> ProcessedDataset:
        columns = list(mapping)
        mappings = [
            ColumnMapping(column, field_id, True, 1.0) if field_id else ColumnMapping.unmapped(column)
            for column, field_id in mapping.items()
        ]
        return ProcessedDataset.create(file_name, rows, columns, mappings, catalog)

    return _make
