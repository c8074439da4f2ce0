from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.data.models import AdminSettingsModel, OrderModel, ProductModel, ProductVariantModel
from app.data.seed import SAMPLE_PRODUCTS, seed
from app.domain.errors import InvalidStatusTransition, OrderNotFoundError, ProductNotFoundError
from app.domain.schemas import ProductIn, SettingsIn
from app.services.admin_service import DEFAULT_SETTINGS, AdminService
from app.services.change_feed import LiveIndex


def _payload(**overrides):
    data = {
        "name": "Boubou",
        "price": 25000,
        "stock": 10,
        "variants": [{"type": "color", "value": "Bleu", "stock": 4}, {"type": "size", "value": "L", "stock": 6}],
    }
    data.update(overrides)
    return ProductIn(**data)


def _order(db, number, status, total, created_at):
    order = OrderModel(
        order_number=number,
        status=status,
        total_amount=total,
        delivery_fee=2000,
        customer_first_name="A",
        customer_last_name="B",
        customer_phone="771234567",
        customer_phone_normalized="+221771234567",
        customer_address="Dakar",
        payment_method="orange_money",
        created_at=created_at,
    )
    db.add(order)
    db.commit()
    return order


def test_variant_stock_cannot_exceed_product_stock():
    with pytest.raises(ValidationError) as exc:
        _payload(stock=5)
    assert "cannot exceed total stock (5)" in str(exc.value)


def test_negative_values_are_rejected():
    with pytest.raises(ValidationError):
        _payload(price=-1)
    with pytest.raises(ValidationError):
        _payload(variants=[{"type": "size", "value": "M", "stock": -2}])


def test_create_product_with_variants(db, change_feed):
    pubsub = change_feed.subscribe(["products"])
    index = LiveIndex("products")

    product = AdminService(db, change_feed=change_feed).create_product(_payload())

    assert product.id is not None
    assert [(v.type, v.value, v.stock) for v in product.variants] == [("color", "Bleu", 4), ("size", "L", 6)]
    change_feed.poll(pubsub, {"products": index})
    assert index.get(product.id)["name"] == "Boubou"


def test_update_replaces_variants_wholesale(db):
    svc = AdminService(db)
    product = svc.create_product(_payload())

    updated = svc.update_product(product.id, _payload(name="Boubou brodé", variants=[{"type": "size", "value": "XL", "stock": 2}]))

    assert updated.name == "Boubou brodé"
    assert [(v.type, v.value) for v in updated.variants] == [("size", "XL")]
    rows = db.query(ProductVariantModel).filter(ProductVariantModel.product_id == product.id).all()
    assert [(v.type, v.value, v.stock) for v in rows] == [("size", "XL", 2)]
    assert db.query(ProductVariantModel).count() == 1


def test_update_unknown_product(db):
    with pytest.raises(ProductNotFoundError):
        AdminService(db).update_product(42, _payload())


def test_status_follows_lifecycle(db):
    order = _order(db, 1, "confirmed", 10000, datetime.now(timezone.utc))
    svc = AdminService(db)

    svc.update_order_status(order.id, "preparing")
    assert db.get(OrderModel, order.id).status == "preparing"

    with pytest.raises(InvalidStatusTransition):
        svc.update_order_status(order.id, "pending")

    svc.update_order_status(order.id, "cancelled")
    with pytest.raises(InvalidStatusTransition):
        svc.update_order_status(order.id, "confirmed")


def test_status_of_unknown_order(db):
    with pytest.raises(OrderNotFoundError):
        AdminService(db).update_order_status(5, "confirmed")


def test_dashboard_counts_confirmed_and_later_only(db, make_product):
    now = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
    _order(db, 1, "pending", 5000, now - timedelta(hours=1))
    _order(db, 2, "confirmed", 10000, now - timedelta(hours=2))
    _order(db, 3, "delivered", 7000, now - timedelta(hours=3))
    _order(db, 4, "cancelled", 9000, now - timedelta(hours=1))
    _order(db, 5, "confirmed", 99000, now - timedelta(days=1))
    make_product()
    make_product(is_active=False)

    stats = AdminService(db).dashboard(now=now)

    assert stats == {"today_orders": 2, "today_revenue": 17000, "total_products": 2}


def test_settings_default_then_upsert(db):
    svc = AdminService(db)
    assert svc.get_settings() == DEFAULT_SETTINGS

    svc.update_settings(SettingsIn(company_name="Ndiol", footer_text="Dakar"))
    svc.update_settings(SettingsIn(hero_title="Soldes"))

    settings = svc.get_settings()
    assert settings["company_name"] == "Ndiol"
    assert settings["hero_title"] == "Soldes"
    assert settings["footer_text"] == "Dakar"
    assert settings["hero_subtitle"] == DEFAULT_SETTINGS["hero_subtitle"]


def test_seed_fills_an_empty_database_once(db):
    seed()
    seed()

    assert db.query(ProductModel).count() == len(SAMPLE_PRODUCTS)
    assert db.query(AdminSettingsModel).count() == 1
    for product in db.query(ProductModel).all():
        assert sum(v.stock for v in product.variants) <= product.stock
