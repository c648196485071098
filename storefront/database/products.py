"""Catalog query engine"""

import logging
from typing import Iterable, Optional

from ..core.errors import InvalidArgument, NotFound
from ..models.product import (
    Category,
    FilterCriteria,
    Product,
    ProductPage,
    SortKey,
)

logger = logging.getLogger(__name__)

FEATURED_MIN_RATING = 4.5


def _relevance_key(product: Product) -> tuple:
    return (product.is_on_sale, product.is_new, product.rating)


# Sort keys are applied with reverse=False unless listed in _DESCENDING.
# Python's sort is stable in both directions, so equal keys keep input order.
_SORT_KEYS = {
    SortKey.RELEVANCE: _relevance_key,
    SortKey.PRICE_ASC: lambda p: p.price,
    SortKey.PRICE_DESC: lambda p: p.price,
    SortKey.NEWEST: lambda p: p.is_new,
    SortKey.BESTSELLING: lambda p: p.review_count,
    SortKey.RATING: lambda p: p.rating,
}

_DESCENDING = {
    SortKey.RELEVANCE,
    SortKey.PRICE_DESC,
    SortKey.NEWEST,
    SortKey.BESTSELLING,
    SortKey.RATING,
}


def sort_products(products: Iterable[Product], sort: SortKey = SortKey.RELEVANCE) -> list[Product]:
    """Stable sort of products by the given key"""
    sort = SortKey(sort)
    return sorted(products, key=_SORT_KEYS[sort], reverse=sort in _DESCENDING)


def paginate(products: list[Product], page: int, page_size: int) -> ProductPage:
    """Cut one page out of an already filtered and sorted list"""
    if page < 1:
        raise InvalidArgument(f"Page must be at least 1, got {page}")
    if page_size <= 0:
        raise InvalidArgument(f"Page size must be positive, got {page_size}")

    total = len(products)
    start = (page - 1) * page_size
    end = start + page_size
    return ProductPage(
        items=products[start:end],
        total=total,
        page=page,
        page_size=page_size,
        has_more=end < total,
    )


class CatalogQueryEngine:
    """In-memory catalog over an immutable product collection"""

    def __init__(
        self,
        products: Iterable[Product],
        categories: Optional[Iterable[Category]] = None,
    ):
        self.products: tuple[Product, ...] = tuple(products)
        self._by_id = {p.id: p for p in self.products}
        self._categories = list(categories or [])

    def __len__(self) -> int:
        return len(self.products)

    # ==================== Lookups ====================

    def find_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID, or None"""
        return self._by_id.get(product_id)

    def get_product(self, product_id: str) -> Product:
        """Get a product by ID"""
        product = self._by_id.get(product_id)
        if not product:
            raise NotFound("Product", product_id)
        return product

    # ==================== Queries ====================

    def query(
        self,
        criteria: Optional[FilterCriteria] = None,
        sort: SortKey = SortKey.RELEVANCE,
        page: int = 1,
        page_size: int = 12,
    ) -> ProductPage:
        """
        Filter, sort and paginate the catalog.

        Returns:
            ProductPage with the requested window, the filtered total and
            whether further pages exist.

        Raises:
            InvalidArgument: page < 1 or page_size <= 0
        """
        criteria = criteria or FilterCriteria()
        matching = [p for p in self.products if criteria.matches(p)]
        result = paginate(sort_products(matching, sort), page, page_size)

        logger.debug(
            f"Catalog query sort={SortKey(sort).value} page={page} size={page_size}: "
            f"{len(result.items)}/{result.total}"
        )
        return result

    def related(
        self,
        product_id: str,
        limit: int = 4,
        category: Optional[str] = None,
    ) -> list[Product]:
        """Best rated products in the same category, excluding the product itself"""
        if limit <= 0:
            raise InvalidArgument(f"Limit must be positive, got {limit}")
        if category is None:
            category = self.get_product(product_id).category

        candidates = [
            p for p in self.products
            if p.id != product_id and p.category == category
        ]
        return sort_products(candidates, SortKey.RATING)[:limit]

    def featured(self, limit: int = 6) -> list[Product]:
        """Products on sale, new or highly rated; sale items first"""
        if limit <= 0:
            raise InvalidArgument(f"Limit must be positive, got {limit}")
        candidates = [
            p for p in self.products
            if p.is_on_sale or p.is_new or p.rating >= FEATURED_MIN_RATING
        ]
        candidates.sort(key=lambda p: (p.is_on_sale, p.rating), reverse=True)
        return candidates[:limit]

    def brands(self) -> list[str]:
        """Distinct brands, alphabetically"""
        return sorted({p.brand for p in self.products if p.brand})

    # ==================== Categories ====================

    def categories(self) -> list[Category]:
        """Categories with product counts, most populated first"""
        counts: dict[str, int] = {}
        for product in self.products:
            counts[product.category] = counts.get(product.category, 0) + 1

        result = [
            category.model_copy(update={"product_count": counts.get(category.id, 0)})
            for category in self._categories
        ]
        result.sort(key=lambda c: (-c.product_count, c.name))
        return result

    def get_category(self, slug: str) -> Category:
        """Get a category by slug"""
        for category in self.categories():
            if category.slug == slug:
                return category
        raise NotFound("Category", slug)
