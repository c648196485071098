# Storefront Models

from .product import (
    Product,
    Category,
    SortKey,
    PriceRange,
    FilterCriteria,
    ProductPage,
)
from .cart import (
    CartLineItem,
    CartSummary,
    CartView,
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
    make_item_key,
)
from .order import Order, OrderItem, OrderStatus

__all__ = [
    "Product",
    "Category",
    "SortKey",
    "PriceRange",
    "FilterCriteria",
    "ProductPage",
    "CartLineItem",
    "CartSummary",
    "CartView",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "make_item_key",
    "Order",
    "OrderItem",
    "OrderStatus",
]
