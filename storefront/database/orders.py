"""Order history"""

import asyncio
import logging
from typing import Iterable, Optional

from ..core.errors import DataSourceUnavailable, NotFound
from ..models.order import Order
from .fixtures import FixtureSource

logger = logging.getLogger(__name__)


class OrderHistory:
    """Read-only view over placed orders"""

    def __init__(self, orders: Iterable[Order]):
        self.orders: dict[str, Order] = {order.id: order for order in orders}

    def list_for_user(self, user_id: str, limit: Optional[int] = None) -> list[Order]:
        """Orders placed by a user, newest first"""
        orders = [o for o in self.orders.values() if o.user_id == user_id]
        orders.sort(key=lambda o: o.order_date, reverse=True)
        return orders[:limit] if limit else orders

    def get_order(self, order_id: str, user_id: Optional[str] = None) -> Order:
        """
        Get an order by ID.

        When user_id is given, orders belonging to someone else are reported
        as missing.
        """
        order = self.orders.get(order_id)
        if not order or (user_id is not None and order.user_id != user_id):
            raise NotFound("Order", order_id)
        return order


class OrderService:
    """Lazily loaded order history"""

    def __init__(self, source: FixtureSource):
        self.source = source
        self.history: Optional[OrderHistory] = None
        self._lock = asyncio.Lock()

    async def get_history(self) -> OrderHistory:
        if self.history is not None:
            return self.history

        async with self._lock:
            if self.history is None:
                try:
                    orders = await self.source.load_orders()
                except DataSourceUnavailable as e:
                    logger.error(f"Order history load failed: {e}")
                    raise
                self.history = OrderHistory(orders)
                logger.info(f"Order history loaded: {len(orders)} orders")
        return self.history
