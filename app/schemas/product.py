from decimal import Decimal
from .common import APIModel


class ProductSummary(APIModel):
    """Datos del producto que acompañan a una línea de pedido."""
    id: int
    name: str
    category: str
    price: Decimal
    stock_quantity: int
    sales: int
    rating: float
