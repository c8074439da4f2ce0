# app/services/admin_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.product import ProductModel, ProductVariantModel
from app.data.models.settings import AdminSettingsModel
from app.domain.errors import InvalidStatusTransition, OrderNotFoundError, ProductNotFoundError
from app.domain.order_status import OrderStatus, can_transition, is_paid
from app.domain.schemas import OrderOut, ProductIn, ProductOut, SettingsIn
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.repos.settings_repo import SettingsRepo
from app.services.change_feed import ChangeFeed, ChangeOp
from app.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS = {
    "company_name": "Ma Boutique",
    "hero_title": "Bienvenue",
    "hero_subtitle": "Découvrez nos produits",
    "hero_image_url": None,
    "logo_url": None,
    "footer_text": None,
}


class AdminService:
    """Back-office: products, order statuses, dashboard, site settings."""

    def __init__(self, db: Session, change_feed: ChangeFeed | None = None):
        self.db = db
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.settings = SettingsRepo(db)
        self.change_feed = change_feed

    def _publish(self, table: str, op: ChangeOp, record: Dict[str, Any]) -> None:
        if self.change_feed is not None:
            self.change_feed.publish(table, op, record)

    # ---------------------------------------------------------- products

    @staticmethod
    def _variants(payload: ProductIn) -> List[ProductVariantModel]:
        return [ProductVariantModel(type=v.type, value=v.value, stock=v.stock) for v in payload.variants]

    def create_product(self, payload: ProductIn) -> ProductModel:
        product = ProductModel(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            image_url=payload.image_url,
            category=payload.category,
            is_active=payload.is_active,
            stock=payload.stock,
        )
        product.variants = self._variants(payload)
        try:
            self.products.add_product(product)
            self.products.commit()
        except Exception:
            self.products.rollback()
            raise

        logger.info(f"Product {product.id} '{product.name}' created with {len(product.variants)} variant(s)")
        self._publish("products", ChangeOp.INSERT, ProductOut.model_validate(product).model_dump(mode="json"))
        return product

    def update_product(self, product_id: int, payload: ProductIn) -> ProductModel:
        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)

        try:
            product.name = payload.name
            product.description = payload.description
            product.price = payload.price
            product.image_url = payload.image_url
            product.category = payload.category
            product.is_active = payload.is_active
            product.stock = payload.stock
            self.products.replace_variants(product, self._variants(payload))
            self.products.commit()
        except Exception:
            self.products.rollback()
            raise

        self.db.refresh(product)
        logger.info(f"Product {product.id} updated, variants replaced ({len(product.variants)})")
        self._publish("products", ChangeOp.UPDATE, ProductOut.model_validate(product).model_dump(mode="json"))
        return product

    # ---------------------------------------------------------- orders

    def list_orders(self, limit: int | None = None) -> List[OrderModel]:
        return self.orders.list_orders(limit=limit)

    def update_order_status(self, order_id: int, status: OrderStatus) -> OrderModel:
        order = self.orders.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        target = OrderStatus(status)
        if not can_transition(order.status, target):
            raise InvalidStatusTransition(order.status, target.value)

        previous = order.status
        order.status = target.value
        try:
            self.orders.commit()
        except Exception:
            self.orders.rollback()
            raise

        logger.info(f"Order {order_id}: {previous} -> {target.value}")
        self._publish("orders", ChangeOp.UPDATE, OrderOut.model_validate(order).model_dump(mode="json"))
        return order

    def dashboard(self, now: datetime | None = None) -> Dict[str, int]:
        """
        Today's figures. An order counts as paid once its status reached
        confirmed (cancelled never counts), whatever its payment_status says.
        """
        now = now or datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        paid = [o for o in self.orders.list_created_since(start_of_day) if is_paid(o.status)]
        return {
            "today_orders": len(paid),
            "today_revenue": sum(o.total_amount for o in paid),
            "total_products": self.products.count(),
        }

    # ---------------------------------------------------------- settings

    def get_settings(self) -> Dict[str, Any]:
        row = self.settings.get_settings()
        if not row:
            return dict(DEFAULT_SETTINGS)
        #missing columns fall back to the defaults
        return {
            key: getattr(row, key) if getattr(row, key) is not None else default
            for key, default in DEFAULT_SETTINGS.items()
        }

    def update_settings(self, payload: SettingsIn) -> Dict[str, Any]:
        row = self.settings.get_settings() or AdminSettingsModel()
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(row, key, value)
        self.settings.save(row)
        logger.info("Site settings updated")
        return self.get_settings()
