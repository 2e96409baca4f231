from sqlalchemy import Column, String, Text, Integer, DateTime, Boolean, Float, func, DECIMAL
from sqlalchemy.orm import relationship
from app.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100), nullable=False, index=True)
    subcategory = Column(String(100), index=True)
    price = Column(DECIMAL(10, 2), nullable=False)
    original_price = Column(DECIMAL(10, 2))
    currency = Column(String(3), default="INR")
    in_stock = Column(Boolean, default=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    sales = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)
    featured = Column(Boolean, default=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    reviews = relationship("Review", back_populates="product", order_by="Review.id")
