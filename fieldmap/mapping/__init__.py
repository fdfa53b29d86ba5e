"""Column classification and mapping resolution."""

from fieldmap.mapping.classifier import ColumnClassifier, classify
from fieldmap.mapping.model import CandidateMatch, ColumnMapping, RawColumn
from fieldmap.mapping.resolver import MappingResolver, validate_bijection

__all__ = [
    "CandidateMatch",
    "ColumnClassifier",
    "ColumnMapping",
    "MappingResolver",
    "RawColumn",
    "classify",
    "validate_bijection",
]
