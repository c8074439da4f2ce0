# app/domain/errors.py


class CheckoutValidationError(ValueError):
    """Missing customer field, empty cart, phone not accepted by the provider."""


class InsufficientStockError(ValueError):
    def __init__(self, product_name: str, remaining: int):
        self.product_name = product_name
        self.remaining = remaining
        super().__init__(
            f"Stock insuffisant pour {product_name}. Il ne reste que {remaining} unité(s)"
        )


class InvalidStatusTransition(ValueError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from '{current}' to '{target}'")


class NotFoundError(LookupError):
    pass


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class PaymentProviderError(RuntimeError):
    """Payment link could not be created; the order is kept pending."""

    def __init__(self, message: str, order_id: int | None = None, status_code: int | None = None):
        self.order_id = order_id
        self.status_code = status_code
        super().__init__(message)
