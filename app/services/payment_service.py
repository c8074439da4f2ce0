# app/services/payment_service.py
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import CheckoutValidationError, OrderNotFoundError
from app.domain.order_status import OrderStatus, PaymentMethod
from app.domain.schemas import OrderOut
from app.repos.order_repo import OrderRepo
from app.services.change_feed import ChangeFeed, ChangeOp
from app.services.notification_service import NotificationService
from app.services.stock_service import StockService
from app.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentService:
    """
    Payment confirmation, triggered by the provider success redirect/webhook
    with nothing but the order id. Callbacks can arrive more than once.
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationService | None = None,
        change_feed: ChangeFeed | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.stock = StockService(db)
        self.notifier = notifier
        self.change_feed = change_feed

    def confirm_payment(self, order_id: int) -> Dict[str, Any]:
        """
        Use Case: payment confirmed.

        1. loads the order with its items
        2. check-and-set payment_status=paid / status=confirmed;
           if another call already did it, stop here (no second decrement)
           a cancelled order only records the payment and is flagged for refund
        3. decrements variant and product stock for each item
        4. commits everything at once, rollback on any failure
        5. broadcasts the payment on the shared channel
        """
        try:
            if not order_id:
                raise CheckoutValidationError("Order ID is required")

            order = self.repo.get_order(order_id)
            if not order:
                raise OrderNotFoundError(order_id)

            if not PaymentMethod(order.payment_method).is_online:
                raise CheckoutValidationError(
                    f"Order {order_id} is paid on delivery, there is no online payment to confirm"
                )

            logger.info(f"Processing payment success for order {order_id}")

            if order.status == OrderStatus.CANCELLED.value:
                self.repo.mark_paid(order_id)
                self.repo.commit()
                logger.warning(f"Payment received for cancelled order {order_id}, refund required")
                return {
                    "success": False,
                    "order_id": order_id,
                    "message": f"La commande {order_id} est annulée, le paiement sera remboursé",
                    "already_processed": False,
                    "refund_required": True,
                }

            if self.repo.mark_paid(order_id) == 0:
                self.repo.rollback()
                logger.info(f"Order {order_id} already marked paid, skipping stock update")
                return {
                    "success": True,
                    "order_id": order_id,
                    "message": "Paiement déjà traité",
                    "already_processed": True,
                }

            for item in order.items:
                self.stock.decrement_for_item(
                    item.product_id,
                    item.quantity,
                    item.color_variant,
                    item.size_variant,
                )

            self.repo.commit()
        except (ValueError, OrderNotFoundError, SQLAlchemyError) as e:
            self.repo.rollback()
            logger.error(f"Payment processing failed for order {order_id}: {e}")
            return {
                "success": False,
                "order_id": order_id,
                "message": str(e),
                "already_processed": False,
                "not_found": isinstance(e, OrderNotFoundError),
            }

        logger.info(f"Order {order_id} paid, stock updated")

        if self.notifier is not None:
            self.notifier.send_payment_success(order_id, "completed")
        if self.change_feed is not None:
            self.db.refresh(order)
            self.change_feed.publish("orders", ChangeOp.UPDATE, OrderOut.model_validate(order).model_dump(mode="json"))

        return {
            "success": True,
            "order_id": order_id,
            "message": "Paiement traité et stock mis à jour avec succès",
            "already_processed": False,
        }

    def payment_failed(self, order_id: int | None) -> Dict[str, Any]:
        """Error redirect: nothing changes, the order stays pending."""
        logger.warning(f"Payment error redirect for order {order_id}")
        return {
            "success": False,
            "order_id": order_id,
            "message": "Le paiement n'a pas pu être effectué. Votre commande reste en attente.",
        }
