# Database modules

from .local_storage import LocalStorage
from .carts import CartStore, serialize_cart, deserialize_cart

__all__ = [
    "LocalStorage",
    "CartStore",
    "serialize_cart",
    "deserialize_cart",
]
