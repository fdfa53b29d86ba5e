"""Business field catalog."""

from fieldmap.catalog.field_catalog import (
    DEFAULT_CATALOG_PATH,
    FieldCatalog,
    FieldDefinition,
    get_default_catalog,
    load_catalog,
    make_field,
    parse_catalog,
)

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "FieldCatalog",
    "FieldDefinition",
    "get_default_catalog",
    "load_catalog",
    "make_field",
    "parse_catalog",
]
