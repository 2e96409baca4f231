from fastapi import APIRouter
from app.api.v1.endpoints import users, orders, payments, admin, reviews

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(payments.router, tags=["payments"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
