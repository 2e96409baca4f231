from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from app.api import deps
from app.core.exceptions import ValidationError
from app.models.order import PaymentMethod
from app.models.user import User
from app.schemas.payment import (
    PaymentQRResponse,
    PaymentRequest,
    UPITransactionResponse,
    UPITransactionSubmit,
)
from app.services import payments as payment_service
from app.services.upi import generate_payment_qr

router = APIRouter()


@router.post("/payment", response_model=PaymentQRResponse)
def create_payment_qr(
    *,
    payment_in: PaymentRequest,
    current_user: User = Depends(deps.get_current_user),
):
    """
    Generar el QR y el deep link UPI para el monto del checkout.

    Args:
        `payment_in`: Monto y método de pago (solo `UPI`)
        `current_user`: Usuario autenticado

    Returns:
        `PaymentQRResponse`: QR en data URL, link `upi://pay`, VPA y nombre del comercio

    Raises:
        `HTTPException`: 400 si el método de pago no es UPI
        `HTTPException`: 500 si el UPI del comercio no está configurado
    """
    if payment_in.payment_method != PaymentMethod.UPI.value:
        raise ValidationError("Unsupported payment method")

    return PaymentQRResponse(**generate_payment_qr(payment_in.amount))


@router.post("/verify-upi-payment", response_model=UPITransactionResponse)
def submit_upi_transaction(
    *,
    db: Session = Depends(deps.get_db),
    background_tasks: BackgroundTasks,
    transaction_in: UPITransactionSubmit,
    current_user: User = Depends(deps.get_current_user),
):
    """
    Registrar el id de transacción UPI y crear la orden pendiente de verificación.

    El pago no se valida contra ningún banco: la orden queda en
    "Payment Submitted" hasta que un administrador lo confirme.

    Raises:
        `HTTPException`: 400 si falta el id de transacción, el carrito está
            vacío o el monto no coincide con el carrito
    """
    db_order = payment_service.submit_transaction(
        db, background_tasks, current_user=current_user, obj_in=transaction_in
    )
    return UPITransactionResponse(
        message="Transaction ID received",
        order_id=db_order.id,
        reference=db_order.reference,
    )
