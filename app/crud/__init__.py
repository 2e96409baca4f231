from .user import user
from .product import product
from .order import order
from .review import review
