# app/api/routers/carts.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_cart_store, get_change_feed, get_payment_client
from app.data.database import get_db
from app.domain.errors import PaymentProviderError, ProductNotFoundError
from app.domain.schemas import CartItemIn, CartOut, CheckoutIn, PlacementOut, QuantityIn
from app.services.cart_service import CartService
from app.services.cart_store import RedisCartStore
from app.services.catalog_service import CatalogService
from app.services.change_feed import ChangeFeed
from app.services.order_service import OrderService
from app.services.payment_client import PaymentLinkClient

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session, store: RedisCartStore):
    return CartService(store=store, catalog=CatalogService(db))


@router.get("/{session_id}", response_model=CartOut)
def get_cart(
    session_id: str,
    db: Session = Depends(get_db),
    store: RedisCartStore = Depends(get_cart_store),
):
    return get_service(db, store).get_cart(session_id)


@router.post("/{session_id}/items", response_model=CartOut)
def add_item(
    session_id: str,
    payload: CartItemIn,
    db: Session = Depends(get_db),
    store: RedisCartStore = Depends(get_cart_store),
):
    svc = get_service(db, store)
    try:
        return svc.add_item(
            session_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
            color=payload.color,
            size=payload.size,
        )
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{session_id}/items/{product_id}", response_model=CartOut)
def update_quantity(
    session_id: str,
    product_id: int,
    payload: QuantityIn,
    db: Session = Depends(get_db),
    store: RedisCartStore = Depends(get_cart_store),
):
    return get_service(db, store).update_quantity(
        session_id, product_id, payload.quantity, payload.color, payload.size
    )


@router.delete("/{session_id}/items/{product_id}", response_model=CartOut)
def remove_item(
    session_id: str,
    product_id: int,
    color: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    store: RedisCartStore = Depends(get_cart_store),
):
    return get_service(db, store).remove_item(session_id, product_id, color or None, size or None)


@router.delete("/{session_id}", response_model=CartOut)
def clear_cart(
    session_id: str,
    db: Session = Depends(get_db),
    store: RedisCartStore = Depends(get_cart_store),
):
    return get_service(db, store).clear(session_id)


@router.post("/{session_id}/checkout", response_model=PlacementOut, status_code=201)
def checkout(
    session_id: str,
    payload: CheckoutIn,
    db: Session = Depends(get_db),
    store: RedisCartStore = Depends(get_cart_store),
    payment_client: PaymentLinkClient = Depends(get_payment_client),
    change_feed: ChangeFeed = Depends(get_change_feed),
):
    """
    Places the order for the stored cart.
    Online methods return the checkout_url of the payment page.
    """
    orders = OrderService(db, payment_client=payment_client, change_feed=change_feed)
    try:
        return orders.checkout_cart(get_service(db, store), session_id, payload.customer, payload.payment_method)
    except PaymentProviderError as e:
        raise HTTPException(status_code=502, detail={"message": str(e), "order_id": e.order_id})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
