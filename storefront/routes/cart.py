"""Cart API routes"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import Settings
from ..core.session import CartSession, SessionManager
from ..database.carts import PricingPolicy
from ..database.products import CatalogQueryEngine
from ..models.cart import (
    AddToCartRequest,
    CartLineItem,
    CartResponse,
    CartView,
    UpdateCartItemRequest,
    DEFAULT_VARIANT,
)
from .deps import get_app_settings, get_cart_session, get_catalog, get_pricing, get_sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def render_cart(session: CartSession, pricing: PricingPolicy) -> CartView:
    return CartView(
        cart_id=session.session_id,
        items=session.cart.items,
        summary=pricing.summarize(session.cart),
    )


@router.post("", response_model=CartResponse)
async def create_cart(
    sessions: SessionManager = Depends(get_sessions),
    pricing: PricingPolicy = Depends(get_pricing),
    settings: Settings = Depends(get_app_settings),
):
    """Create a new shopping cart"""
    expired = sessions.cleanup_old_sessions(settings.session_max_age_hours)
    if expired:
        logger.info(f"Closed {expired} idle cart sessions")
    session = sessions.create_session()
    return CartResponse(cart=render_cart(session, pricing), message="Cart created")


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(
    session: CartSession = Depends(get_cart_session),
    pricing: PricingPolicy = Depends(get_pricing),
):
    """Get cart by ID"""
    return CartResponse(cart=render_cart(session, pricing))


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    session: CartSession = Depends(get_cart_session),
    catalog: CatalogQueryEngine = Depends(get_catalog),
    pricing: PricingPolicy = Depends(get_pricing),
):
    """Add an item to the cart"""
    product = catalog.get_product(request.product_id)

    if not product.in_stock:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")

    if request.color and product.colors and request.color not in product.colors:
        raise HTTPException(
            status_code=400,
            detail=f"Color '{request.color}' not available. Available: {', '.join(product.colors)}",
        )

    item = CartLineItem(
        product_id=product.id,
        variant_key=request.color or DEFAULT_VARIANT,
        name=product.name,
        unit_price=product.price,
        image=product.primary_image,
        available=product.in_stock,
    )
    session.cart.add(item, request.quantity)
    logger.info(f"Cart {session.session_id}: added {request.quantity}x {item.key}")

    return CartResponse(
        cart=render_cart(session, pricing),
        message=f"Added {request.quantity}x {product.name} to cart",
    )


@router.put("/{cart_id}/items/{item_key}", response_model=CartResponse)
async def update_cart_item(
    item_key: str,
    request: UpdateCartItemRequest,
    session: CartSession = Depends(get_cart_session),
    pricing: PricingPolicy = Depends(get_pricing),
):
    """Update item quantity in cart; zero or less removes the item"""
    if item_key not in session.cart:
        raise HTTPException(status_code=404, detail="Item not in cart")

    session.cart.set_quantity(item_key, request.quantity)
    message = "Cart updated" if request.quantity > 0 else "Item removed"
    return CartResponse(cart=render_cart(session, pricing), message=message)


@router.delete("/{cart_id}/items/{item_key}", response_model=CartResponse)
async def remove_from_cart(
    item_key: str,
    session: CartSession = Depends(get_cart_session),
    pricing: PricingPolicy = Depends(get_pricing),
):
    """Remove an item from the cart"""
    session.cart.remove(item_key)
    return CartResponse(cart=render_cart(session, pricing), message="Item removed")


@router.delete("/{cart_id}", response_model=CartResponse)
async def clear_cart(
    session: CartSession = Depends(get_cart_session),
    pricing: PricingPolicy = Depends(get_pricing),
):
    """Clear all items from cart"""
    session.cart.clear()
    return CartResponse(cart=render_cart(session, pricing), message="Cart cleared")
