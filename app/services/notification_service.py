# app/services/notification_service.py
import json

import redis

from app.celery_worker import celery_app
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_CHANNEL = "payment-updates"
PAYMENT_SUCCESS_EVENT = "payment-success"


def get_redis() -> redis.Redis:
    return redis.Redis.from_url(REDIS_URL, decode_responses=True)


class NotificationService:
    """
    Payment completion broadcast.
    The publish runs in a celery worker, the request does not wait on redis.
    """

    @staticmethod
    def send_payment_success(order_id: int, status: str = "completed"):
        send_payment_notification_task.delay(order_id, status)


@celery_app.task(name="app.services.notification_service.send_payment_notification_task")
def send_payment_notification_task(order_id: int, status: str = "completed"):
    """
    Publishes {orderId, status} on the shared payment channel,
    every listening view refreshes that order.
    """
    payload = {
        "type": "broadcast",
        "event": PAYMENT_SUCCESS_EVENT,
        "payload": {"orderId": order_id, "status": status},
    }
    receivers = get_redis().publish(PAYMENT_CHANNEL, json.dumps(payload))
    logger.info(f"[NOTIFICATION] Order {order_id}: payment {status}, {receivers} listener(s)")

    return {"order_id": order_id, "status": status, "receivers": receivers}
