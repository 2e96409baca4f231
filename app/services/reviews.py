from typing import List
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, ValidationError
from app.crud import order as order_crud, product as product_crud, review as review_crud
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)


def add_review(db: Session, *, product_id: int, current_user: User, obj_in: ReviewCreate) -> Review:
    """
    Agrega la reseña de un comprador y recalcula el rating del producto.

    Solo puede reseñar quien tiene una orden pagada y enviada o entregada con
    el producto, y una sola vez por producto. El rating es la media simple de
    todas las reseñas.

    Raises:
        `NotFoundError`: si el producto no existe
        `ForbiddenError`: si el usuario no compró y recibió el producto
        `ValidationError`: si el usuario ya reseñó el producto
    """
    db_product = product_crud.get_or_raise(db, id=product_id)

    if not order_crud.user_has_received_product(db, user_id=current_user.id, product_id=product_id):
        raise ForbiddenError("You can only review products you have purchased and received.")

    if review_crud.get_by_user_and_product(db, user_id=current_user.id, product_id=product_id):
        raise ValidationError("You have already reviewed this product.")

    db_review = Review(
        product_id=product_id,
        user_id=current_user.id,
        rating=obj_in.rating,
        comment=obj_in.comment,
    )
    db.add(db_review)
    try:
        db.flush()
    except IntegrityError:
        # Dos reseñas simultáneas del mismo usuario: gana la primera
        db.rollback()
        raise ValidationError("You have already reviewed this product.")

    ratings = review_crud.ratings_for_product(db, product_id=product_id)
    product_crud.set_rating(db_product, ratings=ratings)
    db.commit()
    db.refresh(db_review)
    logger.info(
        f"Reseña {db_review.id} de usuario {current_user.id} en producto {product_id}; "
        f"rating {db_product.rating:.2f} ({len(ratings)} reseñas)"
    )
    return db_review


def list_reviews(db: Session, *, product_id: int) -> List[Review]:
    product_crud.get_or_raise(db, id=product_id)
    return review_crud.get_by_product(db, product_id=product_id)
