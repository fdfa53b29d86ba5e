"""Analytics session: the current dataset and its metrics."""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from fieldmap.dataset import ProcessedDataset
from fieldmap.exceptions import DatasetNotLoadedError
from fieldmap.metrics.aggregator import MetricsAggregator
from fieldmap.metrics.model import Metrics
from fieldmap.pipeline import MappingPipeline

logger = logging.getLogger(__name__)


class AnalyticsSession:
    """
    Holds one dataset and the metrics derived from it.

    Loading a file or overriding a mapping replaces the dataset and metrics
    together, so readers never see metrics computed from a different
    mapping than the current one.
    """

    def __init__(
        self,
        pipeline: Optional[MappingPipeline] = None,
        aggregator: Optional[MetricsAggregator] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc)
        self.pipeline = pipeline or MappingPipeline()
        self.aggregator = aggregator or MetricsAggregator()
        self._state: Optional[Tuple[ProcessedDataset, Metrics]] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def dataset(self) -> ProcessedDataset:
        return self._require_state()[0]

    @property
    def metrics(self) -> Metrics:
        return self._require_state()[1]

    def snapshot(self) -> Tuple[ProcessedDataset, Metrics]:
        """Current dataset and metrics as one consistent pair."""
        return self._require_state()

    def load(
        self,
        file_name: str,
        rows: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
    ) -> ProcessedDataset:
        """
        Map and aggregate a new file, replacing any previous dataset.

        Args:
            file_name: Source file name
            rows: Raw rows
            columns: Header in source order

        Returns:
            The new ProcessedDataset
        """
        dataset = self.pipeline.process(file_name, rows, columns)
        metrics = self.aggregator.aggregate(dataset)
        with self._lock:
            self._state = (dataset, metrics)
        logger.info(
            f"Session {self.session_id}: loaded {file_name} "
            f"({dataset.row_count} rows, {len(dataset.mapped_fields())} mapped fields)"
        )
        return dataset

    def override(self, column_name: str, field_id: Optional[str]) -> ProcessedDataset:
        """
        Remap one column (or unmap it when field_id is None) and recompute metrics.

        Raises:
            DatasetNotLoadedError: If nothing has been loaded
            UnknownColumnError: If the column is not in the dataset
            UnknownFieldError: If the field is not in the catalog
        """
        current, _ = self._require_state()
        mappings = self.pipeline.resolver.override(
            current.mappings, column_name, field_id, catalog=current.catalog
        )
        dataset = current.with_mappings(mappings)
        metrics = self.aggregator.aggregate(dataset)
        with self._lock:
            self._state = (dataset, metrics)
        logger.info(f"Session {self.session_id}: column {column_name!r} -> {field_id}")
        return dataset

    def reaggregate(self) -> Metrics:
        """Recompute metrics for the current dataset."""
        dataset, _ = self._require_state()
        metrics = self.aggregator.aggregate(dataset)
        with self._lock:
            self._state = (dataset, metrics)
        return metrics

    def _require_state(self) -> Tuple[ProcessedDataset, Metrics]:
        with self._lock:
            state = self._state
        if state is None:
            raise DatasetNotLoadedError(f"Session {self.session_id} has no dataset loaded")
        return state
