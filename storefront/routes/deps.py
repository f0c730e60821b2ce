"""Shared service instances for the storefront routes"""

import logging
from typing import Optional

from ..core.config import settings
from ..database.carts import CartStore
from ..database.local_storage import LocalStorage
from ..services.catalog_client import CatalogClient
from ..services.checkout import CheckoutComposer
from ..services.image_resolver import ImageResolver

logger = logging.getLogger(__name__)

# Initialized lazily; tests replace them through app.dependency_overrides
cart_store: Optional[CartStore] = None
catalog_client: Optional[CatalogClient] = None
image_resolver: Optional[ImageResolver] = None
checkout_composer: Optional[CheckoutComposer] = None


def defer_to_browser(url: str) -> None:
    """The page returned to the shopper opens the hand-off link itself"""
    logger.debug(f"Hand-off link returned to client: {url[:80]}...")


def get_cart_store() -> CartStore:
    """Get or create the session cart store"""
    global cart_store
    if cart_store is None:
        cart_store = CartStore(
            storage=LocalStorage(settings.storage_dir),
            key=settings.cart_storage_key,
        )
    return cart_store


def get_catalog_client() -> CatalogClient:
    """Get or create catalog client"""
    global catalog_client
    if catalog_client is None:
        catalog_client = CatalogClient(
            base_url=settings.supabase_url,
            api_key=settings.supabase_key,
            table=settings.products_table,
            timeout=settings.request_timeout,
        )
    return catalog_client


def get_image_resolver() -> ImageResolver:
    """Get or create image resolver"""
    global image_resolver
    if image_resolver is None:
        image_resolver = ImageResolver(
            storage_url=settings.supabase_url,
            bucket=settings.image_bucket,
            verify=settings.verify_images,
            timeout=settings.request_timeout,
        )
    return image_resolver


def get_checkout_composer() -> CheckoutComposer:
    """Get or create checkout composer"""
    global checkout_composer
    if checkout_composer is None:
        checkout_composer = CheckoutComposer(
            cart_store=get_cart_store(),
            whatsapp_number=settings.whatsapp_number,
            handoff_base_url=settings.handoff_base_url,
            dispatcher=defer_to_browser,
            free_delivery_threshold=settings.free_delivery_threshold,
            delivery_fee=settings.delivery_fee,
        )
    return checkout_composer


async def close_clients() -> None:
    """Close HTTP clients opened by the getters"""
    global catalog_client, image_resolver
    if catalog_client:
        await catalog_client.close()
        catalog_client = None
    if image_resolver:
        await image_resolver.close()
        image_resolver = None
