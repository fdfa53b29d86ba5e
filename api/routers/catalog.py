"""Field catalog API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_catalog
from api.models.responses import CategoryInfo, FieldInfo
from fieldmap.catalog import FieldCatalog

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/catalog", response_model=List[FieldInfo])
def list_fields(
    category: Optional[str] = Query(None, description="Optional category to filter by"),
    catalog: FieldCatalog = Depends(get_catalog),
):
    """
    List business fields in declaration order.

    Args:
        category: Optional category filter
        catalog: Field catalog dependency

    Returns:
        List of field definitions
    """
    fields = catalog.by_category(category) if category else catalog.all()
    return [FieldInfo(**f.to_dict()) for f in fields]


@router.get("/catalog/categories", response_model=List[CategoryInfo])
def list_categories(catalog: FieldCatalog = Depends(get_catalog)):
    """List catalog categories with their field counts."""
    return [
        CategoryInfo(category=category, field_count=len(catalog.by_category(category)))
        for category in catalog.categories()
    ]


@router.get("/catalog/{field_id}", response_model=FieldInfo)
def get_field(field_id: str, catalog: FieldCatalog = Depends(get_catalog)):
    """
    Get one business field.

    Raises:
        UnknownFieldError: If the field does not exist (404)
    """
    return FieldInfo(**catalog.lookup(field_id).to_dict())
