"""Utility functions for raw cell values."""

from typing import Any

import pandas as pd


def is_valid_value(value: Any) -> bool:
    """
    Check if value is valid and not empty.

    Args:
        value: Value to check

    Returns:
        True if value is valid and non-empty, False otherwise
    """
    if value is None:
        return False
    try:
        if pd.isna(value):
            return False
    except (TypeError, ValueError):
        # Not a scalar pandas understands; fall through to the string check
        pass
    return bool(str(value).strip())


def first_valid_values(values, limit: int) -> list:
    """
    Collect the first ``limit`` non-empty values of a column.

    Args:
        values: Iterable of raw cell values
        limit: Maximum number of values to return

    Returns:
        List of at most ``limit`` non-empty values, in order
    """
    collected = []
    if limit <= 0:
        return collected
    for value in values:
        if is_valid_value(value):
            collected.append(value)
            if len(collected) >= limit:
                break
    return collected
