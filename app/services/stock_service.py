# app/services/stock_service.py
from collections import OrderedDict
from typing import Iterable

from sqlalchemy.orm import Session

from app.domain.errors import CheckoutValidationError, InsufficientStockError
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class StockService:
    """
    Stock checks and decrements shared by the cash checkout and the
    payment confirmation. Nothing here commits: the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def check_available(self, lines: Iterable) -> None:
        """
        Pre-flight check, not a reservation. Quantities of lines sharing a
        product (different color/size) are summed against the product stock.
        """
        requested = OrderedDict()
        for line in lines:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        products = self.repo.get_products(requested.keys())
        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None or not product.is_active:
                raise CheckoutValidationError(f"Product {product_id} is no longer available")
            if product.stock < quantity:
                raise InsufficientStockError(product.name, product.stock)

    def decrement_for_item(
        self,
        product_id: int,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> None:
        #every variant snapshot on the line, then the product aggregate
        if color:
            matched = self.repo.decrement_variant_stock(product_id, "color", color, quantity)
            logger.info(f"Product {product_id} color={color}: -{quantity} on {matched} variant(s)")
        if size:
            matched = self.repo.decrement_variant_stock(product_id, "size", size, quantity)
            logger.info(f"Product {product_id} size={size}: -{quantity} on {matched} variant(s)")

        if self.repo.decrement_stock(product_id, quantity) == 0:
            logger.warning(f"Product {product_id} no longer exists, aggregate stock not updated")
        else:
            logger.info(f"Product {product_id}: stock -{quantity}")
