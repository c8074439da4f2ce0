# app/services/order_service.py
from typing import Any, Dict, List
from urllib.parse import urlencode

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel, OrderItemModel
from app.domain.errors import CheckoutValidationError, PaymentProviderError
from app.domain.order_status import OrderStatus, PaymentMethod, PaymentStatus
from app.domain.phone import has_accepted_prefix, normalize_phone, strip_whitespace
from app.domain.schemas import CartItem, CustomerIn, OrderOut, PaymentLinkRequest
from app.repos.order_repo import OrderRepo
from app.services.cart_service import CartService
from app.services.change_feed import ChangeFeed, ChangeOp
from app.services.payment_client import PaymentLinkClient, build_line_items, provider_methods
from app.services.stock_service import StockService
from app.utils.settings import DELIVERY_FEE, SITE_BASE_URL, WAVE_PHONE_PREFIXES
from app.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_CUSTOMER_FIELDS = ("first_name", "last_name", "phone", "address")


def tracking_url(phone: str, order_id: int) -> str:
    return f"/order-tracking?{urlencode({'phone': phone, 'order_id': order_id})}"


def callback_urls(order_id: int, base_url: str = SITE_BASE_URL):
    base = base_url.rstrip("/")
    return (
        f"{base}/order-success?order_id={order_id}",
        f"{base}/order-error?order_id={order_id}",
    )


class OrderService:
    """
    Order placement: cart + customer + payment method -> persisted order.

    Cash on delivery is confirmed and takes its stock in the same transaction.
    Mobile money orders are committed as pending first, then a payment link is
    requested; stock is taken later by the payment confirmation.
    """

    def __init__(
        self,
        db: Session,
        payment_client: PaymentLinkClient | None = None,
        change_feed: ChangeFeed | None = None,
        delivery_fee: int = DELIVERY_FEE,
        wave_prefixes=WAVE_PHONE_PREFIXES,
        site_base_url: str = SITE_BASE_URL,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.stock = StockService(db)
        self.payment_client = payment_client
        self.change_feed = change_feed
        self.delivery_fee = delivery_fee
        self.wave_prefixes = tuple(wave_prefixes)
        self.site_base_url = site_base_url

    def validate(self, items: List[CartItem], customer: CustomerIn, method: PaymentMethod) -> None:
        if not items:
            raise CheckoutValidationError("Votre panier est vide")

        missing = [f for f in REQUIRED_CUSTOMER_FIELDS if not (getattr(customer, f) or "").strip()]
        if missing:
            raise CheckoutValidationError(
                f"Veuillez remplir tous les champs obligatoires ({', '.join(missing)})"
            )

        #wave payment links only accept international numbers
        if method is PaymentMethod.WAVE and not has_accepted_prefix(customer.phone, self.wave_prefixes):
            raise CheckoutValidationError(
                "Pour Wave, le numéro doit être au format international "
                f"({' ou '.join(p + '...' for p in self.wave_prefixes)})"
            )

    def compute_total(self, items: List[CartItem]) -> int:
        return sum(i.price * i.quantity for i in items) + self.delivery_fee

    def _build_order(self, items: List[CartItem], customer: CustomerIn, method: PaymentMethod, status: OrderStatus):
        order = OrderModel(
            order_number=self.repo.next_order_number(),
            status=status.value,
            total_amount=self.compute_total(items),
            delivery_fee=self.delivery_fee,
            customer_first_name=customer.first_name.strip(),
            customer_last_name=customer.last_name.strip(),
            customer_phone=customer.phone.strip(),
            customer_phone_normalized=normalize_phone(customer.phone),
            customer_address=customer.address.strip(),
            payment_method=method.value,
        )
        #denormalized snapshot, stays valid if the product is edited or removed later
        order.items = [
            OrderItemModel(
                product_id=i.product_id,
                product_name=i.name,
                product_image_url=i.image_url,
                quantity=i.quantity,
                unit_price=i.price,
                total_price=i.price * i.quantity,
                color_variant=i.color or None,
                size_variant=i.size or None,
            )
            for i in items
        ]
        return self.repo.add_order(order)

    def _publish(self, order: OrderModel, op: ChangeOp) -> None:
        if self.change_feed is not None:
            self.change_feed.publish("orders", op, OrderOut.model_validate(order).model_dump(mode="json"))

    def _result(self, order: OrderModel, checkout_url: str | None = None) -> Dict[str, Any]:
        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "payment_method": order.payment_method,
            "payment_status": order.payment_status,
            "total_amount": order.total_amount,
            "checkout_url": checkout_url,
            "tracking_url": tracking_url(order.customer_phone, order.id),
        }

    def place_order(self, items: List[CartItem], customer: CustomerIn, payment_method) -> Dict[str, Any]:
        """
        Use Case: order placement.

        1. validates cart and customer (wave: phone prefix)
        2. pre-checks stock for every product, nothing written on failure
        3. cash: confirmed order + stock decrement, one commit
        4. mobile money: pending order committed, then payment link requested
        """
        method = PaymentMethod(payment_method)
        self.validate(items, customer, method)
        self.stock.check_available(items)

        if not method.is_online:
            return self._place_cash_order(items, customer)
        return self._place_online_order(items, customer, method)

    def _place_cash_order(self, items: List[CartItem], customer: CustomerIn) -> Dict[str, Any]:
        try:
            order = self._build_order(items, customer, PaymentMethod.CASH_ON_DELIVERY, OrderStatus.CONFIRMED)
            for item in items:
                self.stock.decrement_for_item(item.product_id, item.quantity, item.color, item.size)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cash order #{order.order_number} (id {order.id}) confirmed, total {order.total_amount}")
        self._publish(order, ChangeOp.INSERT)
        return self._result(order)

    def _place_online_order(self, items: List[CartItem], customer: CustomerIn, method: PaymentMethod) -> Dict[str, Any]:
        if self.payment_client is None:
            raise RuntimeError("No payment client configured for online payments")

        try:
            order = self._build_order(items, customer, method, OrderStatus.PENDING)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order #{order.order_number} (id {order.id}) pending {method.value} payment")
        self._publish(order, ChangeOp.INSERT)

        success_url, error_url = callback_urls(order.id, self.site_base_url)
        request = PaymentLinkRequest(
            method_of_payment=provider_methods(method),
            products=build_line_items(items),
            success_url=success_url,
            error_url=error_url,
            is_escrow=False,
            is_merchant=False,
            metadata={
                "order_id": str(order.id),
                "customer_phone": strip_whitespace(customer.phone),
            },
        )

        try:
            link = self.payment_client.create_transaction(request)
        except PaymentProviderError as e:
            #order stays pending and unpaid, left for manual reconciliation
            e.order_id = order.id
            logger.error(f"Payment link for order {order.id} failed: {e}")
            raise

        order.payment_transaction_id = link.order_id
        order.payment_status = PaymentStatus.PENDING.value
        try:
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order.id} linked to provider transaction {link.order_id}")
        self._publish(order, ChangeOp.UPDATE)
        return self._result(order, checkout_url=link.checkout_url)

    def checkout_cart(self, cart: CartService, session_id: str, customer: CustomerIn, payment_method) -> Dict[str, Any]:
        """Places the order for a stored cart; a cash order empties the cart."""
        items = cart.get_items(session_id)
        result = self.place_order(items, customer, payment_method)
        if not PaymentMethod(payment_method).is_online:
            cart.clear(session_id)
        return result
