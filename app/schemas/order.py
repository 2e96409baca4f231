from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pydantic import Field
from app.models.order import OrderStatus, PaymentMethod, PaymentStatus
from .common import APIModel
from .product import ProductSummary
from .user import UserSummary


class OrderItemIn(APIModel):
    """Línea del carrito enviada por el cliente. El precio no se recalcula."""
    product_id: int
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)


class ShippingAddressIn(APIModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class OrderCreate(APIModel):
    items: List[OrderItemIn] = Field(default_factory=list)
    shipping_address: Optional[ShippingAddressIn] = None
    payment_method: PaymentMethod = PaymentMethod.UPI


class OrderStatusUpdate(APIModel):
    status: OrderStatus


class DeliveryUpdate(APIModel):
    tracking_link: Optional[str] = None
    delivery_phone: Optional[str] = None


class OrderItemResponse(APIModel):
    product_id: int
    quantity: int
    price_at_purchase: Decimal


class ShippingAddress(APIModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class OrderResponse(APIModel):
    id: int
    reference: str
    user_id: int
    items: List[OrderItemResponse]
    total_amount: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    tracking_link: Optional[str] = None
    delivery_phone: Optional[str] = None
    shipping_address: ShippingAddress
    created_at: datetime


class OrderItemWithProduct(OrderItemResponse):
    product: Optional[ProductSummary] = None


class OrderWithDetails(OrderResponse):
    items: List[OrderItemWithProduct]
    user: Optional[UserSummary] = None
