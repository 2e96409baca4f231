from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (UniqueConstraint('user_id', 'product_id', name='unique_user_product_review'),)

    user = relationship("User", back_populates="reviews")
    product = relationship("Product", back_populates="reviews")

    @property
    def reviewer_name(self):
        return self.user.name if self.user else None
