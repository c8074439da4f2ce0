# app/services/tracking_service.py
from typing import List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.domain.errors import CheckoutValidationError
from app.domain.phone import normalize_phone
from app.repos.order_repo import OrderRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class TrackingService:
    """Customer order lookup by phone number, newest first."""

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def find_orders(self, phone: str | None, order_id: int | None = None) -> List[OrderModel]:
        #order_id only narrows a phone lookup, it never exposes an order on its own
        normalized = normalize_phone(phone or "")
        if not normalized:
            raise CheckoutValidationError("Veuillez saisir un numéro de téléphone")

        orders = self.repo.list_by_phone(normalized, order_id=order_id)
        logger.info(f"Lookup {normalized}: {len(orders)} order(s)")
        return orders
