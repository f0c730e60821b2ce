# Storefront services

from .catalog_client import CatalogClient, search_products, sort_products
from .image_resolver import ImageResolver, normalize_image_key
from .checkout import CheckoutComposer, validate_customer_info, compose_order_message
from . import pricing

__all__ = [
    "CatalogClient",
    "search_products",
    "sort_products",
    "ImageResolver",
    "normalize_image_key",
    "CheckoutComposer",
    "validate_customer_info",
    "compose_order_message",
    "pricing",
]
