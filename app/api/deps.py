# app/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from app.services.cart_store import RedisCartStore
from app.services.change_feed import ChangeFeed
from app.services.notification_service import NotificationService
from app.services.payment_client import PaymentLinkClient
from app.utils.settings import ADMIN_API_KEY


@lru_cache
def get_cart_store() -> RedisCartStore:
    return RedisCartStore()


@lru_cache
def get_change_feed() -> ChangeFeed:
    return ChangeFeed()


@lru_cache
def get_payment_client() -> PaymentLinkClient:
    return PaymentLinkClient()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_admin_key() -> str:
    return ADMIN_API_KEY


def require_admin(
    x_admin_key: str | None = Header(None),
    expected: str = Depends(get_admin_key),
):
    #no key configured: back-office left open (dev)
    if expected and x_admin_key != expected:
        raise HTTPException(status_code=401, detail="Invalid admin key")
