from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api import deps
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services import reviews as review_service

router = APIRouter()


@router.post("/{product_id}", response_model=ReviewResponse, status_code=201)
def add_review(
    *,
    db: Session = Depends(deps.get_db),
    product_id: int,
    review_in: ReviewCreate,
    current_user: User = Depends(deps.get_current_user),
):
    """
    Reseñar un producto comprado y recibido.

    Raises:
        `HTTPException`: 404 si el producto no existe
        `HTTPException`: 403 si no hay una orden pagada y enviada/entregada con el producto
        `HTTPException`: 400 si ya reseñaste el producto
    """
    return review_service.add_review(
        db, product_id=product_id, current_user=current_user, obj_in=review_in
    )


@router.get("/{product_id}", response_model=List[ReviewResponse])
def list_reviews(product_id: int, db: Session = Depends(deps.get_db)):
    return review_service.list_reviews(db, product_id=product_id)
