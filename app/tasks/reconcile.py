# app/tasks/reconcile.py
from datetime import datetime, timedelta, timezone

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.domain.order_status import OrderStatus
from app.repos.order_repo import OrderRepo
from app.utils.settings import PENDING_ORDER_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


def cancel_stale_orders(db, now: datetime | None = None, ttl_seconds: int = PENDING_ORDER_TTL_SECONDS) -> int:
    """
    Online orders whose payment never came through are cancelled after the TTL.
    Their stock was never taken, so there is nothing to give back.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(seconds=ttl_seconds)
    repo = OrderRepo(db)

    stale = repo.list_stale_pending(cutoff)
    logger.info(f"Found {len(stale)} stale pending order(s) created before {cutoff.isoformat()}")

    for order in stale:
        order.status = OrderStatus.CANCELLED.value
        logger.info(f"Order {order.id} (#{order.order_number}) cancelled, payment never confirmed")

    repo.commit()
    return len(stale)


@celery_app.task(name="app.tasks.reconcile.cancel_stale_orders_task")
def cancel_stale_orders_task():
    logger.info("Cancel stale orders task started")

    db = SessionLocal()
    try:
        return cancel_stale_orders(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
