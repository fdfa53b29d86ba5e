"""Processed dataset: raw rows plus their resolved column mappings."""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from fieldmap.catalog.field_catalog import FieldCatalog
from fieldmap.constants import ExpectedType, NormalizationReason
from fieldmap.exceptions import NormalizationError
from fieldmap.mapping.model import ColumnMapping
from fieldmap.normalization.normalizer import normalize, uses_percent_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedColumn:
    """Normalized values of one field, aligned with dataset rows."""

    field_id: str
    source_column: str
    values: Tuple[Any, ...]  # None where the cell is missing or unparseable
    missing: int = 0
    skipped: int = 0  # unparseable cells

    @property
    def valid_values(self) -> List[Any]:
        return [v for v in self.values if v is not None]


@dataclass(frozen=True)
class ProcessedDataset:
    """
    A loaded file with its rows and column mappings.

    Rows are read-only views; the dataset never changes after construction.
    Re-mapping produces a new dataset via with_mappings().
    """

    file_name: str
    columns: Tuple[str, ...]
    data: Tuple[Mapping[str, Any], ...]
    mappings: Tuple[ColumnMapping, ...]
    catalog: FieldCatalog = field(repr=False, compare=False)

    @classmethod
    def create(
        cls,
        file_name: str,
        rows: Iterable[Mapping[str, Any]],
        columns: Sequence[str],
        mappings: Sequence[ColumnMapping],
        catalog: FieldCatalog,
    ) -> "ProcessedDataset":
        """Build a dataset, copying rows so the caller keeps no handle on them."""
        data = tuple(MappingProxyType(dict(row)) for row in rows)
        return cls(
            file_name=file_name,
            columns=tuple(columns),
            data=data,
            mappings=tuple(mappings),
            catalog=catalog,
        )

    @property
    def row_count(self) -> int:
        return len(self.data)

    @property
    def is_empty(self) -> bool:
        return not self.data or not self.columns

    def mapped_fields(self) -> Dict[str, str]:
        """field id -> source column for every mapped column."""
        return {m.business_field: m.source_column for m in self.mappings if m.mapped}

    def column_for(self, field_id: str) -> Optional[str]:
        return self.mapped_fields().get(field_id)

    def is_mapped(self, field_id: str) -> bool:
        return field_id in self.mapped_fields()

    def mapping_for(self, column_name: str) -> Optional[ColumnMapping]:
        for mapping in self.mappings:
            if mapping.source_column == column_name:
                return mapping
        return None

    def unmapped_columns(self) -> Tuple[str, ...]:
        return tuple(m.source_column for m in self.mappings if not m.mapped)

    def normalized_column(self, field_id: str) -> Optional[NormalizedColumn]:
        """
        Normalize every cell of the column mapped to a field.

        Args:
            field_id: Business field id

        Returns:
            NormalizedColumn, or None when the field is not mapped

        Raises:
            UnknownFieldError: If the field is not in the catalog
        """
        definition = self.catalog.lookup(field_id)
        column = self.column_for(field_id)
        if column is None:
            return None

        percent_points = None
        if definition.expected_type == ExpectedType.PERCENTAGE:
            # One scale for the whole column
            percent_points = uses_percent_points(row.get(column) for row in self.data)

        values: List[Any] = []
        missing = 0
        skipped = 0
        for row in self.data:
            try:
                values.append(normalize(row.get(column), definition.expected_type, percent_points))
            except NormalizationError as e:
                values.append(None)
                if e.reason == NormalizationReason.EMPTY:
                    missing += 1
                else:
                    skipped += 1

        if skipped:
            logger.debug(f"Skipped {skipped} unparseable cells in column {column!r} ({field_id})")

        return NormalizedColumn(
            field_id=field_id,
            source_column=column,
            values=tuple(values),
            missing=missing,
            skipped=skipped,
        )

    def values_for(self, field_id: str) -> List[Any]:
        """Normalized non-empty values of a field, in row order; [] when unmapped."""
        normalized = self.normalized_column(field_id)
        return normalized.valid_values if normalized else []

    def with_mappings(self, mappings: Sequence[ColumnMapping]) -> "ProcessedDataset":
        """Same rows under a different mapping."""
        return replace(self, mappings=tuple(mappings))

    def to_dict(self, include_rows: bool = False) -> dict:
        """Convert to dictionary for API responses"""
        result = {
            "file_name": self.file_name,
            "row_count": self.row_count,
            "columns": list(self.columns),
            "mappings": [m.to_dict() for m in self.mappings],
        }
        if include_rows:
            result["data"] = [dict(row) for row in self.data]
        return result
