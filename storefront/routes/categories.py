"""Category API routes"""

from fastapi import APIRouter, Depends

from ..database.products import CatalogQueryEngine
from ..models.product import Category
from .deps import get_catalog

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=list[Category])
async def list_categories(catalog: CatalogQueryEngine = Depends(get_catalog)):
    """List categories with product counts, most populated first"""
    return catalog.categories()


@router.get("/{slug}", response_model=Category)
async def get_category(slug: str, catalog: CatalogQueryEngine = Depends(get_catalog)):
    """Get a category by slug"""
    return catalog.get_category(slug)
