# app/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import OrderOut
from app.services.tracking_service import TrackingService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/tracking", response_model=List[OrderOut])
def track_orders(
    phone: Optional[str] = Query(None),
    order_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Orders of a customer by phone number, newest first.
    No match is an empty list.
    """
    try:
        return TrackingService(db).find_orders(phone, order_id=order_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
