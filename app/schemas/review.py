from typing import Optional
from datetime import datetime
from pydantic import Field
from .common import APIModel


class ReviewCreate(APIModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewResponse(APIModel):
    id: int
    product_id: int
    user_id: int
    reviewer_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: datetime
