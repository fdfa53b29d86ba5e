"""Business field mapping engine.

Maps the columns of arbitrary business files onto a catalog of business
fields, normalizes their values and aggregates headline metrics.
"""

from fieldmap.catalog import FieldCatalog, FieldDefinition, get_default_catalog, load_catalog
from fieldmap.dataset import ProcessedDataset
from fieldmap.mapping import CandidateMatch, ColumnClassifier, ColumnMapping, MappingResolver, RawColumn
from fieldmap.metrics import Metrics, MetricsAggregator
from fieldmap.normalization import normalize
from fieldmap.pipeline import MappingPipeline
from fieldmap.session import AnalyticsSession

__all__ = [
    "AnalyticsSession",
    "CandidateMatch",
    "ColumnClassifier",
    "ColumnMapping",
    "FieldCatalog",
    "FieldDefinition",
    "MappingPipeline",
    "MappingResolver",
    "Metrics",
    "MetricsAggregator",
    "ProcessedDataset",
    "RawColumn",
    "get_default_catalog",
    "load_catalog",
    "normalize",
]
