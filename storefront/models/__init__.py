# Storefront Models

from .product import Product, ProductListResponse, ALL_PRODUCTS, CATEGORIES, SORT_KEYS
from .cart import Cart, CartLine, AddToCartRequest, UpdateCartItemRequest, CartResponse
from .checkout import (
    CheckoutState,
    CustomerInfo,
    OrderTotals,
    ValidationResponse,
    CheckoutResult,
    CheckoutResponse,
)

__all__ = [
    "Product",
    "ProductListResponse",
    "ALL_PRODUCTS",
    "CATEGORIES",
    "SORT_KEYS",
    "Cart",
    "CartLine",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "CheckoutState",
    "CustomerInfo",
    "OrderTotals",
    "ValidationResponse",
    "CheckoutResult",
    "CheckoutResponse",
]
