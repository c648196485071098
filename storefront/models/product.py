"""Product and catalog query models"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model read from and written as camelCase JSON"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Product(CamelModel):
    """Immutable catalog record"""
    id: str
    name: str
    price: Decimal = Field(ge=0)
    original_price: Optional[Decimal] = None
    description: str = ""
    short_description: Optional[str] = None
    category: str
    brand: str = ""
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0, alias="reviews")
    in_stock: bool = True
    is_new: bool = False
    is_on_sale: bool = False
    discount_percent: Optional[int] = Field(default=None, alias="discount")
    tags: list[str] = []
    colors: list[str] = []
    images: list[str] = []
    features: list[str] = []
    specifications: dict[str, str] = {}

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None


class Category(CamelModel):
    """Product category"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[str] = None
    product_count: int = 0


class SortKey(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"
    BESTSELLING = "bestselling"
    RATING = "rating"


class PriceRange(BaseModel):
    """Inclusive price bounds; no max means unbounded"""
    min: Decimal = Field(default=Decimal("0"), ge=0)
    max: Optional[Decimal] = Field(default=None, ge=0)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_bounds(self) -> "PriceRange":
        if self.max is not None and self.min > self.max:
            raise ValueError("price range minimum exceeds maximum")
        return self

    def contains(self, price: Decimal) -> bool:
        if price < self.min:
            return False
        return self.max is None or price <= self.max


class FilterCriteria(BaseModel):
    """
    Catalog filters.

    Every field is optional and present filters are combined with AND.
    Empty sets and blank search text count as absent.
    """
    categories: Optional[frozenset[str]] = None
    brands: Optional[frozenset[str]] = None
    price_range: Optional[PriceRange] = None
    min_rating: Optional[float] = Field(default=None, ge=0, le=5)
    in_stock_only: bool = False
    on_sale_only: bool = False
    search: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("categories", "brands", mode="before")
    @classmethod
    def empty_set_is_absent(cls, value):
        if value is not None and len(value) == 0:
            return None
        return value

    @field_validator("search")
    @classmethod
    def blank_search_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def matches(self, product: Product) -> bool:
        """Check a product against every present predicate"""
        if self.categories is not None and product.category not in self.categories:
            return False
        if self.brands is not None and product.brand not in self.brands:
            return False
        if self.price_range is not None and not self.price_range.contains(product.price):
            return False
        if self.min_rating is not None and product.rating < self.min_rating:
            return False
        if self.in_stock_only and not product.in_stock:
            return False
        if self.on_sale_only and not product.is_on_sale:
            return False
        if self.search is not None and not _matches_text(product, self.search.lower()):
            return False
        return True


def _matches_text(product: Product, term: str) -> bool:
    fields = [product.name, product.description, product.brand, *product.tags]
    return any(term in field.lower() for field in fields)


class ProductPage(CamelModel):
    """One page of catalog query results"""
    items: list[Product]
    total: int
    page: int
    page_size: int
    has_more: bool
