# app/api/routers/payments.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_change_feed, get_notifier
from app.data.database import get_db
from app.domain.schemas import PaymentConfirmationOut, PaymentSuccessIn
from app.services.change_feed import ChangeFeed
from app.services.notification_service import NotificationService
from app.services.payment_service import PaymentService

router = APIRouter(tags=["payments"])


def get_service(db: Session, notifier: NotificationService, change_feed: ChangeFeed):
    return PaymentService(db, notifier=notifier, change_feed=change_feed)


def _confirm(svc: PaymentService, order_id: int):
    result = svc.confirm_payment(order_id)
    if not result["success"]:
        if result.get("not_found"):
            status_code = 404
        elif result.get("refund_required"):
            status_code = 409
        else:
            status_code = 400
        raise HTTPException(status_code=status_code, detail=result["message"])
    return result


@router.post("/payments/success", response_model=PaymentConfirmationOut)
def payment_success(
    payload: PaymentSuccessIn,
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    """Webhook form of the provider success callback."""
    return _confirm(get_service(db, notifier, change_feed), payload.order_id)


@router.get("/order-success", response_model=PaymentConfirmationOut)
def order_success(
    order_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    """Success redirect of the payment page."""
    return _confirm(get_service(db, notifier, change_feed), order_id)


@router.get("/order-error")
def order_error(
    order_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    return get_service(db, notifier, change_feed).payment_failed(order_id)
