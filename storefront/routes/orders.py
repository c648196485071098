"""Order history API routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..database.orders import OrderHistory
from ..models.order import Order
from .deps import get_order_history

router = APIRouter(prefix="/api/users/{user_id}/orders", tags=["Orders"])


@router.get("", response_model=list[Order])
async def list_orders(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1),
    history: OrderHistory = Depends(get_order_history),
):
    """List a user's orders, newest first"""
    return history.list_for_user(user_id, limit=limit)


@router.get("/{order_id}", response_model=Order)
async def get_order(
    user_id: str,
    order_id: str,
    history: OrderHistory = Depends(get_order_history),
):
    """Get order details"""
    return history.get_order(order_id, user_id=user_id)
