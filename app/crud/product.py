from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.product import Product
from app.schemas.product import ProductSummary
import logging

logger = logging.getLogger(__name__)


class CRUDProduct(CRUDBase[Product, ProductSummary, ProductSummary]):
    def get_for_update(self, db: Session, *, product_id: int) -> Optional[Product]:
        """
        Carga un producto bloqueando su fila hasta el commit (SELECT ... FOR UPDATE).

        En SQLite el bloqueo se ignora; la transacción completa ya es serializada.
        """
        return (
            db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .first()
        )

    def get_existing_ids(self, db: Session, *, ids: Iterable[int]) -> List[int]:
        ids = set(ids)
        if not ids:
            return []
        rows = db.query(Product.id).filter(Product.id.in_(ids)).all()
        return [row.id for row in rows]

    def apply_sale(self, db_product: Product, *, quantity: int) -> Product:
        """
        Descuenta stock y suma ventas por una línea de pedido verificada.

        El stock nunca baja de 0; las ventas suman la cantidad pedida aunque
        el stock ya estuviera agotado. No hace commit: lo hace quien confirma
        el pago, en la misma transacción que la orden.
        """
        previous_stock = db_product.stock_quantity or 0
        db_product.stock_quantity = max(previous_stock - quantity, 0)
        # Las ventas no dependen del stock: con stock 0 igual suman lo pedido
        db_product.sales = (db_product.sales or 0) + quantity
        db_product.in_stock = db_product.stock_quantity > 0

        if previous_stock < quantity:
            logger.warning(
                f"Stock insuficiente en producto {db_product.id}: "
                f"había {previous_stock}, se vendieron {quantity}"
            )
        return db_product

    def set_rating(self, db_product: Product, *, ratings: List[int]) -> Product:
        db_product.rating = sum(ratings) / len(ratings) if ratings else 0
        return db_product


product = CRUDProduct(Product, label="Producto")
