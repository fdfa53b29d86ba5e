"""Field Mapping Pipeline

Orchestrates the mapping engine for one loaded file:
1. Column sampling - collect the first non-empty values of each column
2. Classification - score every column against the catalog
3. Resolution - pick a one-to-one column -> field mapping
4. Dataset - bundle rows and mappings into a ProcessedDataset
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from fieldmap.catalog.field_catalog import FieldCatalog, get_default_catalog
from fieldmap.config import get_config
from fieldmap.dataset import ProcessedDataset
from fieldmap.mapping.classifier import ColumnClassifier
from fieldmap.mapping.model import CandidateMatch, ColumnMapping, RawColumn
from fieldmap.mapping.resolver import MappingResolver
from fieldmap.utils.value_utils import first_valid_values

logger = logging.getLogger(__name__)


def collect_columns(rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[str]] = None) -> List[str]:
    """
    Column names in source order.

    Uses the given header when present, otherwise the union of row keys in
    first-seen order. Duplicate names are kept once.
    """
    if columns is not None:
        return list(dict.fromkeys(str(c) for c in columns))
    seen: Dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(str(key), None)
    return list(seen)


class MappingPipeline:
    """Pipeline that turns raw rows into a ProcessedDataset"""

    def __init__(
        self,
        catalog: Optional[FieldCatalog] = None,
        classifier: Optional[ColumnClassifier] = None,
        resolver: Optional[MappingResolver] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize pipeline.

        Args:
            catalog: Field catalog (defaults to the packaged catalog)
            classifier: Column classifier
            resolver: Mapping resolver
            max_workers: Threads used to classify columns (1 = sequential)
        """
        app_config = get_config()
        self.catalog = catalog or get_default_catalog()
        self.classifier = classifier or ColumnClassifier()
        self.resolver = resolver or MappingResolver(classifier=self.classifier)
        self.max_workers = max_workers if max_workers is not None else app_config.classification_workers

    def build_raw_columns(
        self, rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[str]] = None
    ) -> Tuple[RawColumn, ...]:
        """Sample each column's first non-empty values."""
        names = collect_columns(rows, columns)
        sample_size = self.classifier.sample_size
        return tuple(
            RawColumn(
                name=name,
                sample_values=tuple(first_valid_values((row.get(name) for row in rows), sample_size)),
            )
            for name in names
        )

    def classify_columns(self, raw_columns: Sequence[RawColumn]) -> List[Tuple[CandidateMatch, ...]]:
        """Classify every column; results keep column order."""
        results: List[Optional[Tuple[CandidateMatch, ...]]] = [None] * len(raw_columns)

        if self.max_workers > 1 and len(raw_columns) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                future_to_index = {
                    executor.submit(self.classifier.classify, column, self.catalog): index
                    for index, column in enumerate(raw_columns)
                }
                for future in as_completed(future_to_index):
                    results[future_to_index[future]] = future.result()
        else:
            for index, column in enumerate(raw_columns):
                results[index] = self.classifier.classify(column, self.catalog)

        return results

    def map_columns(
        self, rows: Sequence[Mapping[str, Any]], columns: Optional[Sequence[str]] = None
    ) -> Tuple[ColumnMapping, ...]:
        """Resolve mappings for raw rows without building a dataset."""
        raw_columns = self.build_raw_columns(rows, columns)
        candidates = self.classify_columns(raw_columns)
        return self.resolver.resolve(raw_columns, self.catalog, candidates)

    def process(
        self,
        file_name: str,
        rows: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
    ) -> ProcessedDataset:
        """
        Map a file's rows and build the processed dataset.

        Args:
            file_name: Source file name
            rows: Raw rows (column name -> raw value)
            columns: Header in source order (derived from rows when omitted)

        Returns:
            ProcessedDataset with one mapping per column
        """
        rows = list(rows)
        names = collect_columns(rows, columns)
        logger.info(f"Mapping {len(names)} columns of {file_name} ({len(rows)} rows)")

        mappings = self.map_columns(rows, names)
        return ProcessedDataset.create(
            file_name=file_name,
            rows=rows,
            columns=names,
            mappings=mappings,
            catalog=self.catalog,
        )
