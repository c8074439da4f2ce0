import pytest

from app.data.models import OrderModel, ProductModel, ProductVariantModel
from app.domain.errors import CheckoutValidationError, InsufficientStockError, PaymentProviderError
from app.domain.schemas import CartItem, CustomerIn
from app.services.cart_service import CartService
from app.services.catalog_service import CatalogService
from app.services.order_service import OrderService
from app.services.change_feed import LiveIndex
from tests.fakes import FakePaymentClient, stock_of

CUSTOMER = CustomerIn(first_name="Awa", last_name="Diop", phone="+221 77 123 45 67", address="Plateau, Dakar")


def _line(product, quantity=1, color=None, size=None):
    return CartItem(
        product_id=product.id,
        name=product.name,
        price=product.price,
        quantity=quantity,
        color=color,
        size=size,
        category=product.category,
        image_url=product.image_url,
    )


def _service(db, payment_client=None, change_feed=None):
    return OrderService(db, payment_client=payment_client, change_feed=change_feed, delivery_fee=2000)


def test_total_is_subtotal_plus_delivery_fee(db, make_product, payment_client):
    a = make_product(name="A", price=1500, stock=10)
    b = make_product(name="B", price=700, stock=10)

    result = _service(db, payment_client).place_order([_line(a, 3), _line(b, 2)], CUSTOMER, "orange_money")

    assert result["total_amount"] == 1500 * 3 + 700 * 2 + 2000
    order = db.get(OrderModel, result["order_id"])
    assert order.delivery_fee == 2000
    assert sum(i.total_price for i in order.items) + order.delivery_fee == order.total_amount


def test_cash_order_is_confirmed_and_takes_stock(db, make_product):
    product = make_product(stock=5, variants=[("color", "rouge", 3), ("size", "M", 2)])

    result = _service(db).place_order([_line(product, 2, color="rouge", size="M")], CUSTOMER, "cash_on_delivery")

    assert result["status"] == "confirmed"
    assert result["checkout_url"] is None
    assert stock_of(db, ProductModel, product.id) == 3
    variants = {v.value: v.stock for v in db.get(ProductModel, product.id).variants}
    assert variants == {"rouge": 1, "M": 0}


def test_cash_order_stock_is_floored_at_zero(db, make_product):
    product = make_product(stock=2, variants=[("color", "noir", 1)])

    _service(db).place_order([_line(product, 2, color="noir")], CUSTOMER, "cash_on_delivery")

    assert stock_of(db, ProductModel, product.id) == 0
    assert stock_of(db, ProductVariantModel, product.variants[0].id) == 0


def test_online_order_stays_pending_and_keeps_stock(db, make_product, payment_client):
    product = make_product(stock=4)

    result = _service(db, payment_client).place_order([_line(product, 2)], CUSTOMER, "orange_money")

    assert result["status"] == "pending"
    assert result["payment_status"] == "pending"
    assert result["checkout_url"] == "https://checkout.test/pay/1"
    assert stock_of(db, ProductModel, product.id) == 4

    order = db.get(OrderModel, result["order_id"])
    assert order.payment_transaction_id == "naboo-1"
    assert order.customer_phone == "+221 77 123 45 67"
    assert order.customer_phone_normalized == "+221771234567"


def test_payment_link_request_contents(db, make_product, payment_client):
    product = make_product(name="Boubou" * 30, price=12500, stock=3, category=None)

    result = _service(db, payment_client).place_order([_line(product, 1, color="Bleu", size="L")], CUSTOMER, "wave")

    request = payment_client.requests[0]
    assert request.method_of_payment == ["WAVE"]
    assert request.success_url == f"https://shop.test/order-success?order_id={result['order_id']}"
    assert request.error_url == f"https://shop.test/order-error?order_id={result['order_id']}"
    assert request.metadata == {"order_id": str(result["order_id"]), "customer_phone": "+221771234567"}
    line = request.products[0]
    assert len(line.name) == 100
    assert line.category == "General"
    assert line.amount == 12500
    assert line.description == (product.name + " - Couleur: Bleu - Taille: L")[:200]


def test_items_are_denormalized(db, make_product, payment_client):
    product = make_product(name="Sandales", price=12000, stock=3)

    result = _service(db, payment_client).place_order([_line(product, 2, size="42")], CUSTOMER, "orange_money")

    product.name = "Renamed"
    product.price = 1
    db.commit()

    item = db.get(OrderModel, result["order_id"]).items[0]
    assert (item.product_name, item.unit_price, item.total_price, item.size_variant) == ("Sandales", 12000, 24000, "42")
    assert item.color_variant is None
    assert item.product_image_url == product.image_url


def test_insufficient_stock_aborts_before_any_write(db, make_product, payment_client):
    product = make_product(name="Sac", stock=3)

    with pytest.raises(InsufficientStockError) as exc:
        _service(db, payment_client).place_order([_line(product, 5)], CUSTOMER, "orange_money")

    assert exc.value.product_name == "Sac"
    assert exc.value.remaining == 3
    assert "Sac" in str(exc.value) and "3" in str(exc.value)
    assert db.query(OrderModel).count() == 0
    assert payment_client.requests == []


def test_stock_check_sums_variant_lines_of_one_product(db, make_product):
    product = make_product(stock=3)
    lines = [_line(product, 2, color="rouge"), _line(product, 2, color="bleu")]

    with pytest.raises(InsufficientStockError):
        _service(db).place_order(lines, CUSTOMER, "cash_on_delivery")
    assert stock_of(db, ProductModel, product.id) == 3


def test_empty_cart_is_rejected(db):
    with pytest.raises(CheckoutValidationError):
        _service(db).place_order([], CUSTOMER, "cash_on_delivery")


@pytest.mark.parametrize("field", ["first_name", "last_name", "phone", "address"])
def test_blank_customer_field_is_rejected(db, make_product, field):
    product = make_product()
    customer = CUSTOMER.model_copy(update={field: "   "})

    with pytest.raises(CheckoutValidationError):
        _service(db).place_order([_line(product)], customer, "cash_on_delivery")
    assert db.query(OrderModel).count() == 0


def test_wave_requires_international_prefix(db, make_product, payment_client):
    product = make_product()
    customer = CUSTOMER.model_copy(update={"phone": "77 123 45 67"})

    with pytest.raises(CheckoutValidationError):
        _service(db, payment_client).place_order([_line(product)], customer, "wave")
    assert db.query(OrderModel).count() == 0


def test_local_phone_is_fine_for_orange_money(db, make_product, payment_client):
    product = make_product()
    customer = CUSTOMER.model_copy(update={"phone": "77 123 45 67"})

    result = _service(db, payment_client).place_order([_line(product)], customer, "orange_money")
    assert result["status"] == "pending"


def test_provider_failure_keeps_pending_order(db, make_product):
    product = make_product(stock=5)
    failing = FakePaymentClient(error=PaymentProviderError("amount must be positive (products.0.amount)", status_code=422))

    with pytest.raises(PaymentProviderError) as exc:
        _service(db, failing).place_order([_line(product, 1)], CUSTOMER, "orange_money")

    order = db.query(OrderModel).one()
    assert exc.value.order_id == order.id
    assert order.status == "pending"
    assert order.payment_status is None
    assert order.payment_transaction_id is None
    assert stock_of(db, ProductModel, product.id) == 5


def test_order_numbers_are_sequential(db, make_product):
    product = make_product(stock=10)
    svc = _service(db)
    first = svc.place_order([_line(product)], CUSTOMER, "cash_on_delivery")
    second = svc.place_order([_line(product)], CUSTOMER, "cash_on_delivery")
    assert second["order_number"] == first["order_number"] + 1


def test_tracking_url_carries_phone_and_order(db, make_product):
    product = make_product()
    result = _service(db).place_order([_line(product)], CUSTOMER, "cash_on_delivery")
    assert result["tracking_url"].startswith("/order-tracking?phone=%2B221+77+123+45+67")
    assert result["tracking_url"].endswith(f"order_id={result['order_id']}")


def test_checkout_clears_cart_only_for_cash(db, make_product, cart_store, payment_client):
    product = make_product(stock=10)
    cart = CartService(cart_store, CatalogService(db))
    svc = _service(db, payment_client)

    cart.add_item("online", product.id, quantity=1)
    svc.checkout_cart(cart, "online", CUSTOMER, "orange_money")
    assert len(cart.get_items("online")) == 1

    cart.add_item("cash", product.id, quantity=1)
    svc.checkout_cart(cart, "cash", CUSTOMER, "cash_on_delivery")
    assert cart.get_items("cash") == []


def test_order_events_are_published(db, make_product, change_feed, payment_client):
    product = make_product()
    pubsub = change_feed.subscribe(["orders"])
    index = LiveIndex("orders")
    result = _service(db, payment_client, change_feed).place_order([_line(product)], CUSTOMER, "orange_money")

    assert change_feed.poll(pubsub, {"orders": index}) == 2
    assert index.get(result["order_id"])["payment_status"] == "pending"
