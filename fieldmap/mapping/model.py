"""Data models for column mapping."""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class RawColumn:
    """A source column with its first non-empty sample values"""

    name: str
    sample_values: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class CandidateMatch:
    """A scored proposal that a column holds a business field"""

    field_id: str
    column_name: str
    confidence: float  # 0.0 - 1.0
    reasons: FrozenSet[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "field_id": self.field_id,
            "column_name": self.column_name,
            "confidence": self.confidence,
            "reasons": sorted(self.reasons),
        }


@dataclass(frozen=True)
class ColumnMapping:
    """Resolved association between a source column and a business field"""

    source_column: str
    business_field: Optional[str]  # field id, None when unmapped
    mapped: bool
    confidence: float
    overridden: bool = False  # set by an explicit user override

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "source_column": self.source_column,
            "business_field": self.business_field,
            "mapped": self.mapped,
            "confidence": self.confidence,
            "overridden": self.overridden,
        }

    @classmethod
    def unmapped(cls, source_column: str, confidence: float = 0.0, overridden: bool = False) -> "ColumnMapping":
        return cls(
            source_column=source_column,
            business_field=None,
            mapped=False,
            confidence=confidence,
            overridden=overridden,
        )
