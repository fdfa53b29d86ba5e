"""Pydantic request models for the field mapping API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class CreateDatasetRequest(BaseModel):
    """Request model for loading rows supplied as JSON."""

    file_name: str = Field(..., min_length=1, description="Name reported for the dataset (e.g., 'sales.csv')")
    rows: List[Dict[str, Any]] = Field(..., description="Rows as column name -> raw value")
    columns: Optional[List[str]] = Field(None, description="Column order (defaults to first-seen row keys)")

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Validate column names are non-empty."""
        if v is not None and any(not str(c).strip() for c in v):
            raise ValueError("columns cannot contain empty names")
        return v


class OverrideMappingRequest(BaseModel):
    """Request model for overriding a column mapping."""

    field_id: Optional[str] = Field(None, description="Target business field id, or null to unmap the column")

    @field_validator("field_id")
    @classmethod
    def validate_field_id(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; an empty id means unmap."""
        if v is None:
            return v
        v = v.strip()
        return v or None
