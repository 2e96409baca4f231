"""
Flujo de conciliación de pagos UPI.

    Creada (unpaid) -> Enviada ("Payment Submitted") -> Verificada (paid, shipped)

No existe callback de la pasarela: el id de transacción lo declara el
comprador y un administrador confirma el pago revisando su app bancaria.
La verificación es el único punto que modifica stock y ventas.
"""
from decimal import Decimal
from typing import Optional, Tuple
import logging

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.crud import order as order_crud, product as product_crud, user as user_crud
from app.models.order import Order, OrderStatus, PaymentStatus, can_transition
from app.models.user import User
from app.schemas.order import OrderCreate, ShippingAddressIn
from app.schemas.payment import UPITransactionSubmit
from app.services import orders as order_service
from app.services.notifications import EmailNotification, NotificationTemplate, notifier

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")


def submit_transaction(
    db: Session,
    background_tasks: BackgroundTasks,
    *,
    current_user: User,
    obj_in: UPITransactionSubmit,
) -> Order:
    """
    Registra el id de transacción UPI del comprador creando la orden.

    La orden queda `processing` / "Payment Submitted" hasta que un
    administrador verifique el pago. Se notifica al comprador y a todos los
    administradores en segundo plano.

    Raises:
        `ValidationError`: id de transacción vacío, carrito vacío, producto
            inexistente o monto distinto al total del carrito
    """
    transaction_id = (obj_in.txn_id or "").strip()
    if not transaction_id:
        raise ValidationError("Transaction ID is required")

    order_in = OrderCreate(
        items=obj_in.items,
        shipping_address=ShippingAddressIn(
            street=obj_in.street,
            city=obj_in.city,
            state=obj_in.state,
            zip_code=obj_in.zip_code,
        ),
    )
    db_order = order_service.build_order(
        db,
        current_user=current_user,
        obj_in=order_in,
        status=OrderStatus.PROCESSING.value,
        payment_status=PaymentStatus.SUBMITTED.value,
        transaction_id=transaction_id,
    )

    cart_total = Decimal(db_order.total_amount)
    if abs(cart_total - obj_in.amount) >= AMOUNT_TOLERANCE:
        db.rollback()
        raise ValidationError(
            f"El monto pagado ({obj_in.amount}) no coincide con el total del carrito ({cart_total})"
        )

    db.commit()
    db.refresh(db_order)
    logger.info(
        f"Orden {db_order.reference} registrada con transacción UPI '{transaction_id}' "
        f"por {db_order.total_amount}; pendiente de verificación"
    )

    notifier.enqueue(
        background_tasks,
        EmailNotification.for_order(db_order, to=current_user.email, template=NotificationTemplate.REQUEST),
    )
    notifier.notify_all_admins(background_tasks, db, order=db_order)
    return db_order


def verify_payment(
    db: Session,
    background_tasks: BackgroundTasks,
    *,
    order_id: int,
    tracking_link: Optional[str] = None,
    delivery_phone: Optional[str] = None,
) -> Tuple[Order, bool]:
    """
    Confirma el pago de una orden (acción manual del administrador).

    En un solo commit: marca la orden `shipped` / `paid`, guarda los datos de
    entrega y, por cada línea, descuenta stock (mínimo 0) y suma ventas. Las
    líneas cuyo producto ya no existe se omiten. Después encola el correo de
    confirmación al comprador.

    Verificar una orden ya pagada no hace nada.

    Returns:
        Tupla (orden, aplicado) donde `aplicado` es False si ya estaba pagada

    Raises:
        `NotFoundError`: si la orden no existe
        `ValidationError`: si la orden no puede pasar a `shipped` (p. ej. cancelada),
            también cuando se cancela mientras se verifica
    """
    db_order = order_crud.get_or_raise(db, id=order_id)

    if db_order.payment_status == PaymentStatus.PAID.value:
        logger.info(f"Orden {db_order.reference} ya estaba pagada; verificación ignorada")
        return db_order, False

    if not can_transition(db_order.status, OrderStatus.SHIPPED):
        raise ValidationError(
            f"No se puede verificar el pago de una orden en estado '{db_order.status}'"
        )

    try:
        if not order_crud.mark_paid(
            db, order_id=db_order.id, tracking_link=tracking_link, delivery_phone=delivery_phone
        ):
            # La fila cambió entre la lectura y el UPDATE
            db.rollback()
            db.refresh(db_order)
            if db_order.payment_status == PaymentStatus.PAID.value:
                logger.info(f"Orden {db_order.reference} verificada por otra petición")
                return db_order, False
            logger.warning(
                f"Orden {db_order.reference} pasó a '{db_order.status}' durante la verificación"
            )
            raise ValidationError(
                f"No se puede verificar el pago de una orden en estado '{db_order.status}'"
            )

        for item in db_order.items:
            db_product = product_crud.get_for_update(db, product_id=item.product_id)
            if db_product is None:
                logger.warning(
                    f"Producto {item.product_id} de la orden {db_order.reference} ya no existe; "
                    f"se omite la actualización de stock"
                )
                continue
            product_crud.apply_sale(db_product, quantity=item.quantity)

        db.commit()
    except ValidationError:
        raise
    except Exception:
        db.rollback()
        logger.error(f"Error verificando el pago de la orden {order_id}", exc_info=True)
        raise

    db.refresh(db_order)
    logger.info(f"Pago de la orden {db_order.reference} verificado")

    buyer = user_crud.get(db, id=db_order.user_id)
    recipient = buyer.email if buyer else db_order.shipping_email
    if recipient:
        notifier.enqueue(
            background_tasks,
            EmailNotification.for_order(db_order, to=recipient, template=NotificationTemplate.CONFIRM),
        )
    return db_order, True
