"""
Sample value type detection.

Each sample value is assigned a value kind; the classifier then scores how
well the kinds of a column's samples fit a field's expected type.
"""

import re
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, Iterable

from fieldmap.constants import ExpectedType
from fieldmap.normalization.normalizer import (
    CURRENCY_CODES,
    CURRENCY_SYMBOLS,
    parse_date_string,
    parse_decimal,
)


class ValueKind:
    """Kinds detected from individual sample values."""
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATE = "date"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    BOOLEAN = "boolean"
    TEXT = "text"


# How well each value kind supports an expected type (0.0 - 1.0)
KIND_COMPATIBILITY: Dict[str, Dict[str, float]] = {
    ExpectedType.CURRENCY: {ValueKind.CURRENCY: 1.0, ValueKind.NUMBER: 0.8},
    ExpectedType.NUMBER: {ValueKind.NUMBER: 1.0, ValueKind.CURRENCY: 0.3},
    ExpectedType.PERCENTAGE: {ValueKind.PERCENTAGE: 1.0, ValueKind.NUMBER: 0.5},
    ExpectedType.DATE: {ValueKind.DATE: 1.0},
    ExpectedType.IDENTIFIER: {ValueKind.IDENTIFIER: 1.0, ValueKind.NUMBER: 0.6},
    ExpectedType.TEXT: {ValueKind.TEXT: 1.0, ValueKind.IDENTIFIER: 0.4},
    ExpectedType.CATEGORICAL: {ValueKind.TEXT: 1.0, ValueKind.BOOLEAN: 1.0, ValueKind.IDENTIFIER: 0.3},
}

BOOLEAN_TOKENS = {"true", "false", "yes", "no", "y", "n"}

_DATE_TOKEN_SPLIT = re.compile(r"[-/.,:\sT]+")
_CURRENCY_MARK_RE = re.compile(
    r"[%s]|\b(?:%s)\b" % (re.escape(CURRENCY_SYMBOLS), "|".join(CURRENCY_CODES)),
    re.IGNORECASE,
)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z]{0,6}[-_#]?\d+[-_A-Za-z0-9]*$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _is_number(text: str) -> bool:
    try:
        parse_decimal(text)
        return True
    except ValueError:
        return False


def _looks_like_date(text: str) -> bool:
    tokens = [t for t in _DATE_TOKEN_SPLIT.split(text) if t]
    if len(tokens) < 2 or not any(t.isdigit() for t in tokens):
        return False
    try:
        parse_date_string(text)
        return True
    except ValueError:
        return False


def detect_value_kind(value: Any) -> str:
    """
    Detect the kind of a single non-empty sample value.

    Numeric values are never treated as dates here even though the
    normalizer accepts spreadsheet serials; otherwise every quantity column
    would look like a date column.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, (datetime, date)):
        return ValueKind.DATE

    text = str(value).strip()
    lowered = text.lower()

    if lowered in BOOLEAN_TOKENS:
        return ValueKind.BOOLEAN

    if text.endswith("%") and _is_number(text[:-1]):
        return ValueKind.PERCENTAGE

    if _CURRENCY_MARK_RE.search(text):
        try:
            parse_decimal(text, allow_currency=True)
            return ValueKind.CURRENCY
        except ValueError:
            pass

    if _looks_like_date(text):
        return ValueKind.DATE

    if _is_number(text):
        # Accounting negatives are almost always money
        if text.startswith("(") and text.endswith(")"):
            return ValueKind.CURRENCY
        return ValueKind.NUMBER

    if _EMAIL_RE.match(text) or _IDENTIFIER_RE.match(text):
        return ValueKind.IDENTIFIER

    return ValueKind.TEXT


def profile_samples(samples: Iterable[Any]) -> Counter:
    """Count detected value kinds across a column's samples."""
    return Counter(detect_value_kind(v) for v in samples)


def type_match_fraction(kind_counts: Counter, expected_type: str) -> float:
    """
    Weighted fraction of samples consistent with an expected type.

    Args:
        kind_counts: Output of profile_samples()
        expected_type: Field's expected type

    Returns:
        0.0 - 1.0; 0.0 when there are no samples
    """
    total = sum(kind_counts.values())
    if not total:
        return 0.0
    compatibility = KIND_COMPATIBILITY.get(expected_type, {})
    score = sum(compatibility.get(kind, 0.0) * count for kind, count in kind_counts.items())
    return score / total
