"""Pydantic response models for the field mapping API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FieldInfo(BaseModel):
    """Business field information."""

    id: str
    display_name: str
    category: str
    expected_type: str
    aliases: List[str]
    keyword_patterns: List[str]


class CategoryInfo(BaseModel):
    """Catalog category with its field count."""

    category: str
    field_count: int


class CandidateInfo(BaseModel):
    """Scored candidate field for a column."""

    field_id: str
    confidence: float
    reasons: List[str]


class ColumnMappingInfo(BaseModel):
    """Resolved mapping for one column."""

    source_column: str
    business_field: Optional[str] = None
    mapped: bool
    confidence: float
    overridden: bool = False
    candidates: List[CandidateInfo] = Field(default_factory=list)


class DatasetSummary(BaseModel):
    """Loaded dataset information."""

    session_id: str
    file_name: str
    row_count: int
    columns: List[str]
    mapped_count: int
    unmapped_columns: List[str]


class CreateDatasetResponse(BaseModel):
    """Response model for dataset upload or creation."""

    session_id: str
    dataset: DatasetSummary
    mappings: List[ColumnMappingInfo]
    metrics: Dict[str, Any]


class MappingsResponse(BaseModel):
    """Response model for mapping queries and overrides."""

    session_id: str
    mappings: List[ColumnMappingInfo]


class MetricsResponse(BaseModel):
    """Response model for metrics."""

    session_id: str
    metrics: Dict[str, Any]


class FieldValuesResponse(BaseModel):
    """Normalized values of one mapped field."""

    session_id: str
    field_id: str
    source_column: Optional[str] = None
    values: List[Any]
    total: int
    missing: int = 0
    skipped: int = 0


class DeleteSessionResponse(BaseModel):
    """Response model for session deletion."""

    session_id: str
    deleted: bool
