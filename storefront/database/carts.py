"""Cart storage for the storefront"""

import json
import logging
from typing import Callable, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import PersistenceCorrupt
from ..models.cart import Cart, CartLine
from ..models.product import Product
from .local_storage import LocalStorage

logger = logging.getLogger(__name__)

CartListener = Callable[[Cart], None]

_lines_adapter = TypeAdapter(list[CartLine])


def serialize_cart(items: list[CartLine]) -> str:
    """Encode cart lines as a JSON array"""
    return json.dumps([item.model_dump(mode="json") for item in items])


def deserialize_cart(raw: str) -> list[CartLine]:
    """
    Decode a JSON array of cart lines.

    Raises:
        PersistenceCorrupt: if the data is malformed or breaks a cart invariant
    """
    try:
        items = _lines_adapter.validate_json(raw)
    except PydanticValidationError as e:
        raise PersistenceCorrupt(f"Malformed cart data: {e.error_count()} error(s)") from e

    seen = set()
    for item in items:
        if item.id in seen:
            raise PersistenceCorrupt(f"Duplicate cart line for product {item.id}")
        seen.add(item.id)
    return items


class CartStore:
    """
    Owns the cart for the active session.

    Every mutation is persisted before it becomes visible, then listeners
    are notified with a snapshot of the new cart.
    """

    def __init__(self, storage: LocalStorage, key: str = "cart"):
        self.storage = storage
        self.key = key
        self._items: list[CartLine] = []
        self._listeners: list[CartListener] = []
        self.load()

    # ==================== Persistence ====================

    def load(self) -> Cart:
        """Rehydrate from storage, falling back to an empty cart"""
        try:
            raw = self.storage.get_item(self.key)
        except OSError as e:
            logger.warning(f"Could not read persisted cart: {e}")
            raw = None
        except PersistenceCorrupt as e:
            logger.warning(f"Discarding persisted cart: {e}")
            raw = None

        if raw is None:
            self._items = []
            return self.get_cart()

        try:
            self._items = deserialize_cart(raw)
            logger.info(f"Loaded cart with {len(self._items)} line(s)")
        except PersistenceCorrupt as e:
            logger.warning(f"Discarding persisted cart: {e}")
            self._items = []
        return self.get_cart()

    def save(self) -> None:
        """Persist the current cart"""
        self.storage.set_item(self.key, serialize_cart(self._items))

    def _commit(self, items: list[CartLine]) -> Cart:
        self.storage.set_item(self.key, serialize_cart(items))
        self._items = items
        cart = self.get_cart()
        self._notify(cart)
        return cart

    # ==================== Listeners ====================

    def subscribe(self, listener: CartListener) -> None:
        """Register a callback invoked after every cart change"""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: CartListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, cart: Cart) -> None:
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception:
                logger.exception(f"Cart listener {listener!r} failed")

    # ==================== Queries ====================

    def get_cart(self) -> Cart:
        """Snapshot of the current cart"""
        return Cart(items=[item.model_copy() for item in self._items])

    def get_item(self, product_id: int) -> Optional[CartLine]:
        item = next((item for item in self._items if item.id == product_id), None)
        return item.model_copy() if item else None

    # ==================== Mutations ====================

    def add_item(self, product: Product) -> Cart:
        """
        Add one unit of a product.

        Any quantity carried by the incoming object is ignored; an add is
        always +1.
        """
        existing = next((item for item in self._items if item.id == product.id), None)

        if existing:
            items = [
                item.model_copy(update={"quantity": item.quantity + 1})
                if item.id == product.id else item
                for item in self._items
            ]
            logger.info(f"Cart: {existing.name or product.id} x{existing.quantity + 1}")
        else:
            fields = product.model_dump(include=set(Product.model_fields))
            items = [*self._items, CartLine(**fields, quantity=1)]
            logger.info(f"Cart: added {product.name or product.id}")

        return self._commit(items)

    def remove_item(self, product_id: int) -> Cart:
        """Remove a line; absent ids are ignored"""
        if not any(item.id == product_id for item in self._items):
            return self.get_cart()

        logger.info(f"Cart: removed product {product_id}")
        return self._commit([item for item in self._items if item.id != product_id])

    def set_quantity(self, product_id: int, quantity: int) -> Cart:
        """Set a line's quantity; zero or less removes the line"""
        if quantity <= 0:
            return self.remove_item(product_id)

        if not any(item.id == product_id for item in self._items):
            return self.get_cart()

        items = [
            item.model_copy(update={"quantity": quantity}) if item.id == product_id else item
            for item in self._items
        ]
        logger.info(f"Cart: product {product_id} quantity set to {quantity}")
        return self._commit(items)

    def clear(self) -> Cart:
        """Remove all items from the cart"""
        logger.info("Cart: cleared")
        return self._commit([])
