# app/api/routers/admin.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_change_feed, require_admin
from app.data.database import get_db
from app.domain.errors import NotFoundError
from app.domain.schemas import (
    DashboardOut,
    OrderOut,
    ProductIn,
    ProductOut,
    SettingsIn,
    SettingsOut,
    StatusUpdateIn,
)
from app.services.admin_service import AdminService
from app.services.change_feed import ChangeFeed

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def get_service(db: Session, change_feed: ChangeFeed):
    return AdminService(db, change_feed=change_feed)


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    return get_service(db, change_feed).create_product(payload)


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductIn,
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    """Full replace, variants included."""
    try:
        return get_service(db, change_feed).update_product(product_id, payload)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/orders", response_model=List[OrderOut])
def list_orders(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    return get_service(db, change_feed).list_orders(limit=limit)


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    try:
        return get_service(db, change_feed).update_order_status(order_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    return get_service(db, change_feed).dashboard()


@router.get("/settings", response_model=SettingsOut)
def get_settings(
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    return get_service(db, change_feed).get_settings()


@router.put("/settings", response_model=SettingsOut)
def update_settings(
    payload: SettingsIn,
    db: Session = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    return get_service(db, change_feed).update_settings(payload)
