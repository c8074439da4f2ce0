# app/services/cart_service.py
from typing import Any, Dict, List, Optional

from app.domain.schemas import CartItem
from app.services.catalog_service import CatalogService
from app.services.cart_store import RedisCartStore
from app.utils.logging import get_logger

logger = get_logger(__name__)


class Cart:
    """
    Ordered line items of one shopper.
    Lines are keyed by (product_id, color, size): adding a known key bumps
    the quantity, a new key is appended at the end.
    """

    def __init__(self, items: Optional[List[CartItem]] = None):
        self.items: List[CartItem] = list(items or [])

    def _index(self, key) -> int:
        for i, item in enumerate(self.items):
            if item.key == key:
                return i
        return -1

    def add(self, item: CartItem) -> CartItem:
        idx = self._index(item.key)
        if idx > -1:
            existing = self.items[idx]
            existing.quantity += item.quantity
            return existing
        self.items.append(item)
        return item

    def update_quantity(self, product_id: int, quantity: int, color=None, size=None) -> None:
        if quantity <= 0:
            self.remove(product_id, color, size)
            return
        idx = self._index((product_id, color, size))
        if idx > -1:
            self.items[idx].quantity = quantity

    def remove(self, product_id: int, color=None, size=None) -> None:
        key = (product_id, color, size)
        self.items = [i for i in self.items if i.key != key]

    def clear(self) -> None:
        self.items = []

    def total_price(self) -> int:
        return sum(i.price * i.quantity for i in self.items)

    def total_items(self) -> int:
        return sum(i.quantity for i in self.items)

    def __len__(self):
        return len(self.items)


class CartService:
    """
    Commands (add, update, remove, clear) load the cart from the store,
    change it and save it back. Query (get) only reads.
    """

    def __init__(self, store: RedisCartStore, catalog: CatalogService):
        self.store = store
        self.catalog = catalog

    def _load(self, session_id: str) -> Cart:
        return Cart(self.store.load(session_id))

    def _view(self, session_id: str, cart: Cart) -> Dict[str, Any]:
        return {
            "session_id": session_id,
            "items": cart.items,
            "total_price": cart.total_price(),
            "total_items": cart.total_items(),
        }

    #query
    def get_cart(self, session_id: str) -> Dict[str, Any]:
        return self._view(session_id, self._load(session_id))

    def get_items(self, session_id: str) -> List[CartItem]:
        return self._load(session_id).items

    #commands
    def add_item(
        self,
        session_id: str,
        product_id: int,
        quantity: int = 1,
        color: str | None = None,
        size: str | None = None,
    ) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        #price, name and image are snapshotted from the catalog at add time
        product = self.catalog.get_product(product_id)

        cart = self._load(session_id)
        line = cart.add(
            CartItem(
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=quantity,
                color=color,
                size=size,
                category=product.category,
                image_url=product.image_url,
            )
        )
        self.store.save(session_id, cart.items)

        logger.info(f"Cart {session_id}: product {product_id} ({color}/{size}) now x{line.quantity}")
        return self._view(session_id, cart)

    def update_quantity(
        self,
        session_id: str,
        product_id: int,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> Dict[str, Any]:
        cart = self._load(session_id)
        cart.update_quantity(product_id, quantity, color, size)
        self.store.save(session_id, cart.items)
        return self._view(session_id, cart)

    def remove_item(
        self,
        session_id: str,
        product_id: int,
        color: str | None = None,
        size: str | None = None,
    ) -> Dict[str, Any]:
        cart = self._load(session_id)
        cart.remove(product_id, color, size)
        self.store.save(session_id, cart.items)
        logger.info(f"Cart {session_id}: product {product_id} ({color}/{size}) removed")
        return self._view(session_id, cart)

    def clear(self, session_id: str) -> Dict[str, Any]:
        self.store.clear(session_id)
        logger.info(f"Cart {session_id} cleared")
        return self._view(session_id, Cart())
