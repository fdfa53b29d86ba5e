"""
Business Field Catalog

Defines the registry of business fields that raw columns can be mapped to.
The default catalog is declared in ``fields.yaml`` next to this module.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern, Tuple, Union

import yaml

from fieldmap.constants import ExpectedType, FieldCategory
from fieldmap.exceptions import CatalogError, UnknownFieldError
from fieldmap.utils.text import normalize_name

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "fields.yaml"

REGEX_PREFIX = "re:"

KeywordPattern = Union[str, Pattern]


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a business field"""

    id: str
    display_name: str
    category: str
    expected_type: str
    aliases: FrozenSet[str]  # normalized
    keyword_patterns: Tuple[KeywordPattern, ...]  # normalized phrases or compiled regex

    @property
    def normalized_names(self) -> Tuple[str, ...]:
        """Normalized display name and id (the field's own names)."""
        names = [normalize_name(self.display_name)]
        id_name = normalize_name(self.id)
        if id_name not in names:
            names.append(id_name)
        return tuple(names)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "category": self.category,
            "expected_type": self.expected_type,
            "aliases": sorted(self.aliases),
            "keyword_patterns": [
                REGEX_PREFIX + p.pattern if hasattr(p, "pattern") else p
                for p in self.keyword_patterns
            ],
        }


def make_field(
    id: str,
    display_name: str,
    category: str,
    expected_type: str,
    aliases: Iterable[str] = (),
    keywords: Iterable[str] = (),
) -> FieldDefinition:
    """
    Build a FieldDefinition from raw strings, normalizing aliases and keywords.

    Raises:
        CatalogError: If category, type or a keyword regex is invalid
    """
    if not id or not isinstance(id, str):
        raise CatalogError(f"Field id must be a non-empty string, got: {id!r}")
    if category not in FieldCategory.ALL:
        raise CatalogError(f"Field '{id}' has unknown category: {category}")
    if expected_type not in ExpectedType.ALL:
        raise CatalogError(f"Field '{id}' has unknown expected type: {expected_type}")

    normalized_aliases = frozenset(a for a in (normalize_name(x) for x in aliases) if a)

    patterns: List[KeywordPattern] = []
    for keyword in keywords:
        keyword = str(keyword)
        if keyword.startswith(REGEX_PREFIX):
            try:
                patterns.append(re.compile(keyword[len(REGEX_PREFIX):]))
            except re.error as e:
                raise CatalogError(f"Field '{id}' has invalid keyword pattern {keyword!r}: {e}") from e
        else:
            normalized = normalize_name(keyword)
            if normalized:
                patterns.append(normalized)

    return FieldDefinition(
        id=id,
        display_name=display_name or id,
        category=category,
        expected_type=expected_type,
        aliases=normalized_aliases,
        keyword_patterns=tuple(patterns),
    )


class FieldCatalog:
    """Immutable registry of business fields, kept in declaration order."""

    def __init__(self, fields: Iterable[FieldDefinition], allow_empty: bool = False):
        """
        Initialize the catalog.

        Args:
            fields: Field definitions in declaration order
            allow_empty: Permit an empty catalog (the resolver treats it as
                "nothing can be mapped")

        Raises:
            CatalogError: On duplicate ids or an empty catalog
        """
        fields = tuple(fields)
        if not fields and not allow_empty:
            raise CatalogError("Field catalog is empty")

        by_id: Dict[str, FieldDefinition] = {}
        order: Dict[str, int] = {}
        for index, field in enumerate(fields):
            if field.id in by_id:
                raise CatalogError(f"Duplicate field id in catalog: {field.id}")
            by_id[field.id] = field
            order[field.id] = index

        self._fields = fields
        self._by_id = by_id
        self._order = order

    def lookup(self, field_id: str) -> FieldDefinition:
        """
        Get a field by id.

        Raises:
            UnknownFieldError: If the id is not in the catalog
        """
        try:
            return self._by_id[field_id]
        except KeyError:
            raise UnknownFieldError(field_id) from None

    def all(self) -> Tuple[FieldDefinition, ...]:
        """All fields in declaration order."""
        return self._fields

    def by_category(self, category: str) -> Tuple[FieldDefinition, ...]:
        """Fields of one category, in declaration order."""
        return tuple(f for f in self._fields if f.category == category)

    def categories(self) -> Tuple[str, ...]:
        """Categories present in the catalog, in first-declared order."""
        return tuple(dict.fromkeys(f.category for f in self._fields))

    def order_of(self, field_id: str) -> int:
        """Declaration index of a field (classifier tie-break key)."""
        return self._order[field_id]

    def __contains__(self, field_id: str) -> bool:
        return field_id in self._by_id

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)


def parse_catalog(data: Dict) -> FieldCatalog:
    """
    Build a catalog from the YAML structure ``{category: [field, ...]}``.

    Each field entry has ``id``, ``name``, ``type`` and optional ``aliases``
    and ``keywords`` lists.

    Raises:
        CatalogError: If the structure is malformed
    """
    if not isinstance(data, dict):
        raise CatalogError("Catalog YAML must be a mapping of category to field list")

    fields = []
    for category, entries in data.items():
        if not isinstance(entries, list):
            raise CatalogError(f"Catalog category '{category}' must contain a list of fields")
        for entry in entries:
            if not isinstance(entry, dict) or "id" not in entry or "type" not in entry:
                raise CatalogError(f"Invalid field entry in category '{category}': {entry!r}")
            fields.append(
                make_field(
                    id=str(entry["id"]),
                    display_name=str(entry.get("name") or entry["id"]),
                    category=str(category),
                    expected_type=str(entry["type"]),
                    aliases=entry.get("aliases") or [],
                    keywords=entry.get("keywords") or [],
                )
            )
    return FieldCatalog(fields)


def load_catalog(path: Optional[Path] = None) -> FieldCatalog:
    """
    Read a field catalog YAML file.

    Args:
        path: YAML path (defaults to the packaged catalog)

    Raises:
        CatalogError: If the file is missing or invalid
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH

    if not catalog_path.exists():
        raise CatalogError(f"Catalog file not found: {catalog_path}")

    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid catalog YAML {catalog_path}: {e}") from e

    catalog = parse_catalog(data)
    logger.info(
        f"Loaded field catalog from {catalog_path}: "
        f"{len(catalog)} fields in {len(catalog.categories())} categories"
    )
    return catalog


@lru_cache()
def get_default_catalog() -> FieldCatalog:
    """Process-wide catalog, loaded once from the configured or packaged YAML."""
    from fieldmap.config import get_config

    return load_catalog(get_config().catalog_path)
