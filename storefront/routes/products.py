"""Product API routes"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from ..core.config import Settings
from ..core.errors import InvalidArgument
from ..database.products import CatalogQueryEngine
from ..models.product import (
    FilterCriteria,
    PriceRange,
    Product,
    ProductPage,
    SortKey,
)
from .deps import get_app_settings, get_catalog

router = APIRouter(prefix="/api/products", tags=["Products"])


def build_criteria(
    categories: Optional[list[str]] = None,
    brands: Optional[list[str]] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    min_rating: Optional[float] = None,
    in_stock: bool = False,
    on_sale: bool = False,
    search: Optional[str] = None,
) -> FilterCriteria:
    """Turn flat query parameters into validated filter criteria"""
    try:
        price_range = None
        if min_price is not None or max_price is not None:
            price_range = PriceRange(min=min_price or Decimal("0"), max=max_price)

        return FilterCriteria(
            categories=categories,
            brands=brands,
            price_range=price_range,
            min_rating=min_rating,
            in_stock_only=in_stock,
            on_sale_only=on_sale,
            search=search,
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise InvalidArgument(f"Invalid filters: {messages}") from e


@router.get("", response_model=ProductPage)
async def search_products(
    category: Optional[list[str]] = Query(None, description="Filter by category (repeatable)"),
    brand: Optional[list[str]] = Query(None, description="Filter by brand (repeatable)"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price"),
    min_rating: Optional[float] = Query(None, ge=0, le=5, description="Minimum rating"),
    in_stock: bool = Query(False, description="Only show in-stock items"),
    on_sale: bool = Query(False, description="Only show items on sale"),
    search: Optional[str] = Query(None, description="Free-text search"),
    sort: SortKey = Query(SortKey.RELEVANCE, description="Sort order"),
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    page_size: Optional[int] = Query(None, ge=1, description="Items per page, capped at max_page_size"),
    catalog: CatalogQueryEngine = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
):
    """Filter, sort and paginate the catalog"""
    criteria = build_criteria(
        categories=category,
        brands=brand,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        in_stock=in_stock,
        on_sale=on_sale,
        search=search,
    )
    return catalog.query(
        criteria,
        sort=sort,
        page=page,
        page_size=min(page_size or settings.default_page_size, settings.max_page_size),
    )


@router.get("/featured", response_model=list[Product])
async def featured_products(
    limit: Optional[int] = Query(None, ge=1),
    catalog: CatalogQueryEngine = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
):
    """Products highlighted on the home page"""
    return catalog.featured(min(limit or settings.featured_limit, settings.max_page_size))


@router.get("/brands", response_model=list[str])
async def list_brands(catalog: CatalogQueryEngine = Depends(get_catalog)):
    """List all brands in the catalog"""
    return catalog.brands()


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    catalog: CatalogQueryEngine = Depends(get_catalog),
):
    """Get a product by ID"""
    return catalog.get_product(product_id)


@router.get("/{product_id}/related", response_model=list[Product])
async def related_products(
    product_id: str,
    limit: Optional[int] = Query(None, ge=1),
    catalog: CatalogQueryEngine = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
):
    """Best rated products from the same category"""
    return catalog.related(product_id, limit=min(limit or settings.related_limit, settings.max_page_size))
