from enum import Enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func, DECIMAL
from sqlalchemy.orm import relationship
from app.core.database import Base


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    SUBMITTED = "Payment Submitted"
    PAID = "paid"


class PaymentMethod(str, Enum):
    UPI = "UPI"


# Estado de envío y estado de pago son ejes independientes
ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

PAYMENT_STATUS_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.SUBMITTED, PaymentStatus.PAID},
    PaymentStatus.SUBMITTED: {PaymentStatus.PAID},
    PaymentStatus.PAID: set(),
}


def can_transition(current, target) -> bool:
    """
    Indica si un cambio de estado es legal.

    Acepta pares de `OrderStatus` o de `PaymentStatus` (o sus valores en texto,
    tal como se guardan en la base de datos). Repetir el estado actual no es una
    transición y devuelve False.
    """
    for status_cls, transitions in (
        (OrderStatus, ORDER_STATUS_TRANSITIONS),
        (PaymentStatus, PAYMENT_STATUS_TRANSITIONS),
    ):
        try:
            return status_cls(target) in transitions[status_cls(current)]
        except ValueError:
            continue
    raise ValueError(f"Estados desconocidos: {current!r} -> {target!r}")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(DECIMAL(10, 2), nullable=False)
    status = Column(String(50), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_status = Column(String(50), nullable=False, default=PaymentStatus.UNPAID.value)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.UPI.value)
    transaction_id = Column(String(255))
    tracking_link = Column(String(500))
    delivery_phone = Column(String(20))

    # Copia de la dirección al momento de la compra
    shipping_name = Column(String(255))
    shipping_email = Column(String(255))
    shipping_phone = Column(String(20))
    shipping_street = Column(String(255))
    shipping_city = Column(String(100))
    shipping_state = Column(String(100))
    shipping_zip_code = Column(String(20))

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )

    @property
    def reference(self) -> str:
        return f"ORD-{self.id:06d}"

    @property
    def shipping_address(self) -> dict:
        return {
            "name": self.shipping_name,
            "email": self.shipping_email,
            "phone": self.shipping_phone,
            "street": self.shipping_street,
            "city": self.shipping_city,
            "state": self.shipping_state,
            "zip_code": self.shipping_zip_code,
        }


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Sin FK: la línea conserva la referencia aunque el producto se elimine
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price_at_purchase = Column(DECIMAL(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship(
        "Product",
        primaryjoin="foreign(OrderItem.product_id) == Product.id",
        viewonly=True,
    )
