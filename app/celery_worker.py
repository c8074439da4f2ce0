# app/celery_worker.py
from celery import Celery

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#tasks have to be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "app.tasks.reconcile",
    "app.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "cancel-stale-pending-orders": {
        "task": "app.tasks.reconcile.cancel_stale_orders_task",
        "schedule": 300.0,  # every 5 minutes
    },
}

celery_app.conf.timezone = "UTC"
