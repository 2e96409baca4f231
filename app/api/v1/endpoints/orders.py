from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.api import deps
from app.crud import order
from app.models.user import User
from app.schemas.order import DeliveryUpdate, OrderCreate, OrderResponse, OrderStatusUpdate
from app.services import orders as order_service

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    *,
    db: Session = Depends(deps.get_db),
    order_in: OrderCreate,
    current_user: User = Depends(deps.get_current_user),
):
    """
    Crear una orden a partir del carrito, sin pago registrado.

    La orden queda `pending` / `unpaid`. El stock no se modifica hasta que
    un administrador verifique el pago.

    Args:
        `db`: Sesión de base de datos
        `order_in`: Líneas del carrito y dirección de envío
        `current_user`: Usuario autenticado que realiza la orden

    Returns:
        `OrderResponse`: Orden creada con el total calculado

    Raises:
        `HTTPException`: 400 si el carrito está vacío o un producto no existe
    """
    return order_service.create_order(db, current_user=current_user, obj_in=order_in)


@router.get("", response_model=List[OrderResponse])
def list_user_orders(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
    skip: int = Query(0, ge=0, description="Número de órdenes a saltar para paginación"),
    limit: int = Query(100, ge=1, le=1000, description="Límite de órdenes por página"),
):
    """
    Obtener las órdenes del usuario autenticado, de la más reciente a la más antigua.
    """
    return order.get_by_user(db, user_id=current_user.id, skip=skip, limit=limit)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Obtener una orden propia por su ID.

    Raises:
        `HTTPException`: 404 si la orden no existe
        `HTTPException`: 403 si la orden no pertenece al usuario
    """
    return order_service.get_user_order(db, order_id=order_id, current_user=current_user)


@router.put("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    *,
    db: Session = Depends(deps.get_db),
    order_id: int,
    status_update: OrderStatusUpdate,
    current_user: User = Depends(deps.get_current_user),
):
    """
    Actualizar el estado de envío de una orden.

    Un administrador puede hacer cualquier transición válida; el comprador
    solo puede cancelar su orden o marcarla como entregada.

    Raises:
        `HTTPException`: 404 si la orden no existe
        `HTTPException`: 403 si no tienes permisos sobre la orden
        `HTTPException`: 400 si la transición de estado no es válida o si se
            pide `shipped`/`delivered` antes de verificar el pago
    """
    return order_service.update_status(
        db, order_id=order_id, new_status=status_update.status, actor=current_user
    )


@router.put("/{order_id}/delivery", response_model=OrderResponse)
def update_order_delivery(
    *,
    db: Session = Depends(deps.get_db),
    order_id: int,
    delivery_in: DeliveryUpdate,
    current_admin: User = Depends(deps.get_current_admin),
):
    """
    Actualizar link de rastreo y teléfono de entrega (solo administradores).

    Raises:
        `HTTPException`: 404 si la orden no existe
    """
    return order_service.update_delivery(db, order_id=order_id, obj_in=delivery_in)
