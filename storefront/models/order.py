"""Order history models"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from .product import CamelModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItem(CamelModel):
    """Item in an order"""
    product_id: str
    product_name: str
    variant: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    image: Optional[str] = None


class ShippingInfo(CamelModel):
    """Shipping method chosen for an order"""
    method: str
    name: str
    cost: Decimal
    tracking_number: Optional[str] = None


class PaymentInfo(CamelModel):
    """Payment method used for an order"""
    type: str
    name: str
    last4: Optional[str] = None
    email: Optional[str] = None
    reference: Optional[str] = None


class ShippingAddress(CamelModel):
    """Shipping address for order"""
    first_name: str
    last_name: str
    address: str
    city: str
    zip_code: str
    province: str
    country: str = "Italia"
    phone: Optional[str] = None


class Order(CamelModel):
    """Placed order, read from the order history"""
    id: str
    order_number: str
    user_id: str
    status: OrderStatus
    order_date: str
    shipped_date: Optional[str] = None
    delivery_date: Optional[str] = None
    estimated_delivery: Optional[str] = None
    cancelled_date: Optional[str] = None
    cancel_reason: Optional[str] = None
    items: list[OrderItem]
    subtotal: Decimal
    shipping: ShippingInfo
    tax: Decimal
    total: Decimal
    payment_method: PaymentInfo
    shipping_address: ShippingAddress
    notes: Optional[str] = None
