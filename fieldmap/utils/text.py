"""Column-name normalization shared by the catalog and the classifier."""

import re
from typing import List

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^0-9a-z]+")

# Tokens where a trailing "s" is part of the word, not a plural
_SINGULAR_KEEP = {"sales", "gross", "status", "analysis", "address", "bonus", "plus", "series", "news", "gps", "sms", "ups"}


def singularize(token: str) -> str:
    """Fold a simple English plural to its singular form."""
    if len(token) <= 3 or token in _SINGULAR_KEEP:
        return token
    if token.endswith("ies") and len(token) > 4:
        return token[:-3] + "y"
    if token.endswith(("ches", "shes", "xes", "sses")):
        return token[:-2]
    if token.endswith(("ss", "us", "is")):
        return token
    if token.endswith("s"):
        return token[:-1]
    return token


def tokenize_name(name: str) -> List[str]:
    """
    Split a raw column name into normalized tokens.

    "CustomerID" -> ["customer", "id"]; "Units_Sold (#)" -> ["unit", "sold"]

    Args:
        name: Raw column name

    Returns:
        List of lowercase, singular tokens
    """
    if name is None:
        return []
    spaced = _CAMEL_BOUNDARY.sub(" ", str(name))
    cleaned = _NON_ALNUM.sub(" ", spaced.lower())
    return [singularize(token) for token in cleaned.split()]


def normalize_name(name: str) -> str:
    """Normalize a column name, alias or keyword to a space-joined token string."""
    return " ".join(tokenize_name(name))


def compact_name(name: str) -> str:
    """Normalized name with spaces removed, for comparing "zipcode" to "zip code"."""
    return normalize_name(name).replace(" ", "")
