# app/domain/order_status.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class PaymentMethod(str, Enum):
    ORANGE_MONEY = "orange_money"
    WAVE = "wave"
    CASH_ON_DELIVERY = "cash_on_delivery"

    @property
    def is_online(self) -> bool:
        return self is not PaymentMethod.CASH_ON_DELIVERY


#linear lifecycle, cancel allowed from any non-terminal state
_FORWARD = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.DELIVERED,
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

#orders counted as paid in dashboard figures
PAID_STATUSES = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
})

STATUS_LABELS = {
    OrderStatus.PENDING: ("En attente", "Votre commande est en attente de confirmation"),
    OrderStatus.CONFIRMED: ("Confirmée", "Votre commande a été confirmée"),
    OrderStatus.PREPARING: ("En préparation", "Votre commande est en cours de préparation"),
    OrderStatus.OUT_FOR_DELIVERY: ("En livraison", "Votre commande est en route vers vous"),
    OrderStatus.DELIVERED: ("Livrée", "Votre commande a été livrée"),
    OrderStatus.CANCELLED: ("Annulée", "Votre commande a été annulée"),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    current = OrderStatus(current)
    target = OrderStatus(target)
    if current in TERMINAL_STATUSES:
        return False
    if target is OrderStatus.CANCELLED:
        return True
    return _FORWARD.get(current) is target


def is_paid(status: str) -> bool:
    return OrderStatus(status) in PAID_STATUSES
