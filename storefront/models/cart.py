"""Cart models"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from .product import CamelModel

DEFAULT_VARIANT = "default"


def make_item_key(product_id: str, variant_key: Optional[str] = None) -> str:
    """Identity key of a cart line: product id plus variant"""
    return f"{product_id}-{variant_key or DEFAULT_VARIANT}"


class CartLineItem(CamelModel):
    """One row in the cart, unique per product and variant"""
    product_id: str
    variant_key: str = DEFAULT_VARIANT
    name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    image: Optional[str] = None
    available: bool = True

    @computed_field
    @property
    def key(self) -> str:
        return make_item_key(self.product_id, self.variant_key)

    @computed_field(alias="lineTotal")
    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CartSummary(CamelModel):
    """Priced totals for a cart"""
    item_count: int
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    amount_to_free_shipping: Decimal
    currency: str


class CartView(CamelModel):
    """Cart as returned by the API"""
    cart_id: str
    items: list[CartLineItem]
    summary: CartSummary


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    color: Optional[str] = None
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity; zero or less removes the item"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    cart: CartView
    message: Optional[str] = None
