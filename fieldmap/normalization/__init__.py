"""Value normalization to canonical types."""

from fieldmap.normalization.normalizer import (
    date_from_serial,
    normalize,
    parse_date_string,
    parse_decimal,
    try_normalize,
    uses_percent_points,
)

__all__ = [
    "date_from_serial",
    "normalize",
    "parse_date_string",
    "parse_decimal",
    "try_normalize",
    "uses_percent_points",
]
