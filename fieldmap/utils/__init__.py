"""Utility functions for the field mapping engine."""

from fieldmap.utils.file_reader import read_tabular
from fieldmap.utils.sanitize import sanitize_for_logging
from fieldmap.utils.text import compact_name, normalize_name, tokenize_name
from fieldmap.utils.value_utils import first_valid_values, is_valid_value

__all__ = [
    "read_tabular",
    "sanitize_for_logging",
    "compact_name",
    "normalize_name",
    "tokenize_name",
    "first_valid_values",
    "is_valid_value",
]
