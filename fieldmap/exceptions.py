"""Custom exceptions for the field mapping engine."""

from typing import Any


class FieldMapError(Exception):
    """Base exception for field mapping errors."""
    pass


class CatalogError(FieldMapError):
    """Field catalog could not be constructed (duplicate ids, empty catalog, bad entry)."""
    pass


class UnknownFieldError(FieldMapError, KeyError):
    """Field id is not present in the catalog."""

    def __init__(self, field_id: str):
        super().__init__(field_id)
        self.field_id = field_id

    def __str__(self) -> str:
        return f"Unknown business field: {self.field_id!r}"


class UnknownColumnError(FieldMapError, KeyError):
    """Column name is not present in the dataset mappings."""

    def __init__(self, column_name: str):
        super().__init__(column_name)
        self.column_name = column_name

    def __str__(self) -> str:
        return f"Unknown source column: {self.column_name!r}"


class MappingConflict(FieldMapError):
    """A field or column appears in more than one mapped entry.

    Only raised inside the resolver, which repairs the conflict.
    """

    def __init__(self, message: str, column_name: str, field_id: str):
        super().__init__(message)
        self.column_name = column_name
        self.field_id = field_id


class NormalizationError(FieldMapError, ValueError):
    """A single cell could not be converted to its canonical type."""

    def __init__(self, reason: str, raw_value: Any, expected_type: str):
        super().__init__(f"{reason}: {raw_value!r} as {expected_type}")
        self.reason = reason
        self.raw_value = raw_value
        self.expected_type = expected_type


class EmptyDatasetError(FieldMapError):
    """Dataset has no rows or no columns."""
    pass


class UnsupportedFileTypeError(FieldMapError, ValueError):
    """Uploaded file extension is not a supported tabular format."""
    pass


class FileDecodeError(FieldMapError, ValueError):
    """Uploaded file content could not be decoded into rows."""
    pass


class DatasetNotLoadedError(FieldMapError):
    """An analytics session was queried before any dataset was loaded."""
    pass
