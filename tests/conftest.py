import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["SITE_BASE_URL"] = "https://shop.test"
os.environ["ADMIN_API_KEY"] = ""

import fakeredis
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_admin_key, get_cart_store, get_change_feed, get_notifier, get_payment_client
from app.data.database import Base, SessionLocal, engine, get_db
from app.data.models import ProductModel, ProductVariantModel
from app.main import app
from app.services.cart_store import RedisCartStore
from app.services.change_feed import ChangeFeed
from tests.fakes import FakeNotifier, FakePaymentClient


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def cart_store(fake_redis):
    return RedisCartStore(client=fake_redis)


@pytest.fixture
def change_feed(fake_redis):
    return ChangeFeed(client=fake_redis)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def payment_client():
    return FakePaymentClient()


@pytest.fixture
def make_product(db):
    def _make(name="Boubou", price=10000, stock=10, variants=(), is_active=True, category="Vêtements"):
        product = ProductModel(
            name=name,
            price=price,
            stock=stock,
            is_active=is_active,
            category=category,
            image_url=f"https://img.test/{name}.jpg",
        )
        product.variants = [ProductVariantModel(type=t, value=v, stock=s) for t, v, s in variants]
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def client(db, cart_store, change_feed, notifier, payment_client):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cart_store] = lambda: cart_store
    app.dependency_overrides[get_change_feed] = lambda: change_feed
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_client] = lambda: payment_client
    app.dependency_overrides[get_admin_key] = lambda: ""
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
