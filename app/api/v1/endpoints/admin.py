from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query
from sqlalchemy.orm import Session
from app.api import deps
from app.crud import order
from app.models.order import OrderStatus
from app.models.user import User
from app.schemas.order import DeliveryUpdate, OrderResponse, OrderWithDetails
from app.schemas.payment import PaymentVerificationResponse
from app.services import payments as payment_service

router = APIRouter()


@router.get("/orders", response_model=List[OrderWithDetails])
def list_all_orders(
    db: Session = Depends(deps.get_db),
    current_admin: User = Depends(deps.get_current_admin),
    status: Optional[OrderStatus] = Query(None, description="Filtrar por estado de envío"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """
    Listar todas las órdenes con datos del comprador y de cada producto.
    """
    return order.get_multi_with_details(
        db, skip=skip, limit=limit, status=status.value if status else None
    )


@router.put("/verify-payment/{order_id}", response_model=PaymentVerificationResponse)
def verify_payment(
    *,
    db: Session = Depends(deps.get_db),
    background_tasks: BackgroundTasks,
    order_id: int,
    delivery_in: Optional[DeliveryUpdate] = Body(None),
    current_admin: User = Depends(deps.get_current_admin),
):
    """
    Confirmar manualmente el pago UPI de una orden.

    Marca la orden como `shipped` / `paid`, descuenta stock, suma ventas y
    notifica al comprador. Repetir la verificación no vuelve a tocar el stock.

    Raises:
        `HTTPException`: 404 si la orden no existe
        `HTTPException`: 400 si la orden está cancelada o entregada
    """
    delivery_in = delivery_in or DeliveryUpdate()
    db_order, _ = payment_service.verify_payment(
        db,
        background_tasks,
        order_id=order_id,
        tracking_link=delivery_in.tracking_link,
        delivery_phone=delivery_in.delivery_phone,
    )
    return PaymentVerificationResponse(order=OrderResponse.model_validate(db_order))
