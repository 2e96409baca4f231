from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from app.crud.base import CRUDBase
from app.models.review import Review
from app.schemas.review import ReviewCreate


class CRUDReview(CRUDBase[Review, ReviewCreate, ReviewCreate]):
    def get_by_product(self, db: Session, *, product_id: int) -> List[Review]:
        return (
            db.query(Review)
            .options(joinedload(Review.user))
            .filter(Review.product_id == product_id)
            .order_by(Review.id)
            .all()
        )

    def get_by_user_and_product(
        self, db: Session, *, user_id: int, product_id: int
    ) -> Optional[Review]:
        return (
            db.query(Review)
            .filter(Review.user_id == user_id, Review.product_id == product_id)
            .first()
        )

    def ratings_for_product(self, db: Session, *, product_id: int) -> List[int]:
        rows = db.query(Review.rating).filter(Review.product_id == product_id).all()
        return [row.rating for row in rows]


review = CRUDReview(Review, label="Reseña")
