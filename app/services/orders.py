"""
Gestión del registro de órdenes: creación desde el carrito y cambios de estado.
"""
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, ValidationError
from app.crud import order as order_crud, product as product_crud
from app.models.order import Order, OrderStatus, PaymentStatus, can_transition
from app.models.user import User
from app.schemas.order import DeliveryUpdate, OrderCreate, ShippingAddressIn

logger = logging.getLogger(__name__)

# Estados que el comprador puede fijar sobre su propia orden
BUYER_SETTABLE_STATUSES = {OrderStatus.CANCELLED, OrderStatus.DELIVERED}

# Solo la verificación del pago pone una orden en `shipped`
PAID_ONLY_STATUSES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


def shipping_snapshot(current_user: User, address: Optional[ShippingAddressIn]) -> dict:
    """
    Copia la dirección de envío; los campos omitidos se toman del perfil.
    """
    address = address or ShippingAddressIn()
    return {
        "name": current_user.name,
        "email": current_user.email,
        "phone": current_user.phone,
        "street": address.street or current_user.street,
        "city": address.city or current_user.city,
        "state": address.state or current_user.state,
        "zip_code": address.zip_code or current_user.zip_code,
    }


def validate_items(db: Session, obj_in: OrderCreate) -> None:
    """
    Rechaza carritos vacíos y líneas que apunten a productos inexistentes.

    Cantidad y precio ya vienen validados por el schema. El precio es el que
    envía el cliente y no se compara con el catálogo.
    """
    if not obj_in.items:
        raise ValidationError("El carrito está vacío")

    requested_ids = {item.product_id for item in obj_in.items}
    missing = requested_ids - set(product_crud.get_existing_ids(db, ids=requested_ids))
    if missing:
        raise ValidationError(
            f"Productos no encontrados: {', '.join(str(i) for i in sorted(missing))}"
        )


def build_order(
    db: Session,
    *,
    current_user: User,
    obj_in: OrderCreate,
    **fields,
) -> Order:
    """
    Valida el carrito y agrega la nueva orden a la sesión sin hacer commit.

    Por defecto la orden nace `pending` / `unpaid`; `fields` permite al flujo
    de pago fijar otro estado inicial en el mismo commit.
    """
    validate_items(db, obj_in)
    fields.setdefault("status", OrderStatus.PENDING.value)
    fields.setdefault("payment_status", PaymentStatus.UNPAID.value)

    db_order = order_crud.build(
        user_id=current_user.id,
        obj_in=obj_in,
        shipping=shipping_snapshot(current_user, obj_in.shipping_address),
        **fields,
    )
    db.add(db_order)
    return db_order


def create_order(db: Session, *, current_user: User, obj_in: OrderCreate) -> Order:
    db_order = build_order(db, current_user=current_user, obj_in=obj_in)
    db.commit()
    db.refresh(db_order)
    logger.info(
        f"Orden {db_order.reference} creada para usuario {current_user.id} "
        f"por {db_order.total_amount}"
    )
    return db_order


def get_user_order(db: Session, *, order_id: int, current_user: User) -> Order:
    db_order = order_crud.get_or_raise(db, id=order_id)
    if db_order.user_id != current_user.id and not current_user.is_admin:
        raise ForbiddenError("No tienes permisos para ver esta orden")
    return db_order


def update_status(
    db: Session,
    *,
    order_id: int,
    new_status: OrderStatus,
    actor: User,
) -> Order:
    """
    Cambia el estado de envío de una orden.

    Args:
        `order_id`: ID de la orden
        `new_status`: Estado destino
        `actor`: Usuario que hace el cambio (admin o dueño de la orden)

    Raises:
        `NotFoundError`: si la orden no existe
        `ForbiddenError`: si el actor no es admin ni dueño, o el dueño pide un
            estado que solo puede fijar un administrador
        `ValidationError`: si la transición no es legal, o si se pide
            `shipped`/`delivered` sobre una orden sin pago verificado
    """
    db_order = order_crud.get_or_raise(db, id=order_id)

    if not actor.is_admin:
        if db_order.user_id != actor.id:
            raise ForbiddenError("No tienes permisos para modificar esta orden")
        if new_status not in BUYER_SETTABLE_STATUSES:
            raise ForbiddenError(f"Solo un administrador puede marcar la orden como '{new_status.value}'")

    if db_order.status == new_status.value:
        return db_order

    if not can_transition(db_order.status, new_status):
        raise ValidationError(
            f"No se puede cambiar la orden de '{db_order.status}' a '{new_status.value}'"
        )

    if new_status in PAID_ONLY_STATUSES and db_order.payment_status != PaymentStatus.PAID.value:
        raise ValidationError(
            f"La orden {db_order.reference} no tiene el pago verificado; "
            f"verifica el pago antes de marcarla como '{new_status.value}'"
        )

    previous = db_order.status
    db_order.status = new_status.value
    db.commit()
    db.refresh(db_order)
    logger.info(f"Orden {db_order.reference}: {previous} -> {new_status.value} (usuario {actor.id})")
    return db_order


def update_delivery(db: Session, *, order_id: int, obj_in: DeliveryUpdate) -> Order:
    """Actualiza link de rastreo y teléfono de entrega sin tocar los estados."""
    db_order = order_crud.get_or_raise(db, id=order_id)
    return order_crud.update(db, db_obj=db_order, obj_in=obj_in)
