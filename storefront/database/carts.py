"""Cart store"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from pydantic import ValidationError

from ..core.errors import InvalidArgument
from ..models.cart import CartLineItem, CartSummary
from .persistence import KeyValueStore, InMemoryKeyValueStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

CartListener = Callable[["CartStore"], None]


class CartStore:
    """
    Line items of one shopping session.

    Lines are merged by identity key (product id plus variant). The snapshot
    is loaded from the key-value store on construction and saved after every
    mutation. All operations run to completion on the caller's thread.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        storage_key: str = "cart",
    ):
        self.storage = storage if storage is not None else InMemoryKeyValueStore()
        self.storage_key = storage_key
        self._items: dict[str, CartLineItem] = {}
        self._listeners: list[CartListener] = []
        self._closed = False
        self._load()

    # ==================== Read access ====================

    @property
    def items(self) -> list[CartLineItem]:
        """Current lines in insertion order"""
        return [item.model_copy() for item in self._items.values()]

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, key: str) -> Optional[CartLineItem]:
        item = self._items.get(key)
        return item.model_copy() if item else None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def total_item_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def total_price(self) -> Decimal:
        return sum((item.line_total for item in self._items.values()), Decimal("0"))

    # ==================== Mutations ====================

    def add(self, item: CartLineItem, quantity: int = 1) -> CartLineItem:
        """
        Add quantity units of an item.

        A line with the same key accumulates the quantity; otherwise a new
        line is inserted with exactly that quantity (the item's own quantity
        is ignored).
        """
        self._check_open()
        if quantity < 1:
            raise InvalidArgument(f"Quantity must be at least 1, got {quantity}")

        key = item.key
        existing = self._items.get(key)
        if existing:
            old_quantity = existing.quantity
            existing.quantity += quantity
            logger.debug(f"Cart {self.storage_key}: {key} {old_quantity} + {quantity} = {existing.quantity}")
            line = existing
        else:
            line = item.model_copy(update={"quantity": quantity})
            self._items[key] = line
            logger.debug(f"Cart {self.storage_key}: new line {key} x{quantity}")

        self._changed()
        return line.model_copy()

    def remove(self, key: str) -> None:
        """Remove a line; unknown keys are ignored"""
        self._check_open()
        if self._items.pop(key, None) is not None:
            self._changed()

    def set_quantity(self, key: str, quantity: int) -> None:
        """Overwrite a line's quantity; zero or less removes the line"""
        self._check_open()
        if quantity <= 0:
            self.remove(key)
            return

        item = self._items.get(key)
        if not item:
            return
        item.quantity = quantity
        self._changed()

    def clear(self) -> None:
        self._check_open()
        self._items = {}
        self._changed()

    # ==================== Notifications ====================

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call listener after every mutation; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """End the session: detach listeners and refuse further mutations"""
        self._listeners.clear()
        self._closed = True

    # ==================== Persistence ====================

    def snapshot(self) -> str:
        return json.dumps([item.model_dump(mode="json") for item in self._items.values()])

    def _load(self) -> None:
        raw = self.storage.get(self.storage_key)
        if not raw:
            return
        try:
            items = [CartLineItem.model_validate(entry) for entry in json.loads(raw)]
        except (ValueError, TypeError, ValidationError) as e:
            logger.error(f"Failed to load cart {self.storage_key}, starting empty: {e}")
            return
        for item in items:
            existing = self._items.get(item.key)
            if existing:
                existing.quantity += item.quantity
            else:
                self._items[item.key] = item
        logger.info(f"Loaded cart {self.storage_key} with {len(self._items)} lines")

    def save(self) -> None:
        """Write the snapshot; storage errors are logged and the cart stays in memory"""
        try:
            self.storage.set(self.storage_key, self.snapshot())
        except OSError as e:
            logger.error(f"Failed to persist cart {self.storage_key}: {e}")

    def _changed(self) -> None:
        self.save()
        for listener in list(self._listeners):
            listener(self)

    def _check_open(self) -> None:
        if self._closed:
            raise InvalidArgument(f"Cart {self.storage_key} is closed")


@dataclass
class PricingPolicy:
    """Tax and shipping rules applied to a cart subtotal"""
    tax_rate: Decimal = Decimal("0.22")
    free_shipping_threshold: Decimal = Decimal("50.00")
    shipping_fee: Decimal = Decimal("9.99")
    currency: str = "EUR"

    @classmethod
    def from_settings(cls, settings) -> "PricingPolicy":
        return cls(
            tax_rate=settings.tax_rate,
            free_shipping_threshold=settings.free_shipping_threshold,
            shipping_fee=settings.shipping_fee,
            currency=settings.currency,
        )

    def summarize(self, cart: CartStore) -> CartSummary:
        """Price a cart: subtotal, shipping, tax and grand total"""
        subtotal = cart.total_price()
        if not len(cart) or subtotal > self.free_shipping_threshold:
            shipping = Decimal("0")
            remaining = Decimal("0")
        else:
            shipping = self.shipping_fee
            remaining = self.free_shipping_threshold - subtotal
        tax = subtotal * self.tax_rate

        return CartSummary(
            item_count=cart.total_item_count(),
            subtotal=_round(subtotal),
            shipping=_round(shipping),
            tax=_round(tax),
            total=_round(subtotal + shipping + tax),
            amount_to_free_shipping=_round(remaining),
            currency=self.currency,
        )


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
