from typing import Any, Dict, List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload, selectinload
from app.crud.base import CRUDBase
from app.models.order import ORDER_STATUS_TRANSITIONS, Order, OrderItem, OrderStatus, PaymentStatus
from app.schemas.order import OrderCreate, DeliveryUpdate

# Estados desde los que una orden puede pasar a `shipped`
SHIPPABLE_STATUSES = [
    status.value
    for status, targets in ORDER_STATUS_TRANSITIONS.items()
    if OrderStatus.SHIPPED in targets
]


class CRUDOrder(CRUDBase[Order, OrderCreate, DeliveryUpdate]):
    def get_by_user(
        self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100
    ) -> List[Order]:
        return (
            db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_multi_with_details(
        self, db: Session, *, skip: int = 0, limit: int = 100, status: Optional[str] = None
    ) -> List[Order]:
        query = db.query(Order).options(
            joinedload(Order.user),
            selectinload(Order.items).joinedload(OrderItem.product),
        )
        if status:
            query = query.filter(Order.status == status)
        return (
            query.order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def user_has_received_product(self, db: Session, *, user_id: int, product_id: int) -> bool:
        """
        True si el usuario tiene una orden pagada y enviada/entregada con el producto.
        """
        return db.query(
            db.query(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .filter(
                Order.user_id == user_id,
                OrderItem.product_id == product_id,
                Order.status.in_([OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value]),
                Order.payment_status == PaymentStatus.PAID.value,
            )
            .exists()
        ).scalar()

    def build(self, *, user_id: int, obj_in: OrderCreate, shipping: Dict[str, Any], **fields) -> Order:
        """
        Construye la orden con la copia de las líneas del carrito y su total.

        No agrega la orden a la sesión; el llamador decide cuándo persistir.
        """
        items = [
            OrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price_at_purchase=item.price,
            )
            for item in obj_in.items
        ]
        total_amount = sum((item.price * item.quantity for item in obj_in.items))
        return Order(
            user_id=user_id,
            items=items,
            total_amount=total_amount,
            payment_method=obj_in.payment_method.value,
            **{f"shipping_{key}": value for key, value in shipping.items()},
            **fields,
        )

    def mark_paid(
        self,
        db: Session,
        *,
        order_id: int,
        tracking_link: Optional[str],
        delivery_phone: Optional[str],
    ) -> bool:
        """
        Marca la orden como pagada y enviada solo si aún no estaba pagada y
        su estado todavía puede pasar a `shipped`.

        Es un UPDATE condicional: si dos administradores verifican a la vez, o si
        la orden se cancela entre la lectura y la verificación, la fila no se
        toca. Devuelve True si este llamado hizo el cambio. No hace commit.
        """
        values = {
            "status": OrderStatus.SHIPPED.value,
            "payment_status": PaymentStatus.PAID.value,
        }
        # Los datos de entrega omitidos conservan lo que ya tenía la orden
        if tracking_link is not None:
            values["tracking_link"] = tracking_link
        if delivery_phone is not None:
            values["delivery_phone"] = delivery_phone

        result = db.execute(
            update(Order)
            .where(
                Order.id == order_id,
                Order.payment_status != PaymentStatus.PAID.value,
                Order.status.in_(SHIPPABLE_STATUSES),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


order = CRUDOrder(Order, label="Orden")
