from app.models.user import User
from app.models.product import Product
from app.models.order import Order, OrderItem
from app.models.review import Review
