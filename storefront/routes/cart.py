"""Cart API routes for the storefront"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..core.errors import CatalogUnavailable
from ..database.carts import CartStore
from ..models.cart import AddToCartRequest, Cart, CartResponse, UpdateCartItemRequest
from ..services import pricing
from ..services.catalog_client import CatalogClient
from ..services.image_resolver import ImageResolver
from .deps import get_cart_store, get_catalog_client, get_image_resolver

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def cart_response(cart: Cart, message: Optional[str] = None) -> CartResponse:
    """Wrap a cart snapshot with its totals"""
    totals = pricing.calculate_totals(
        cart, settings.free_delivery_threshold, settings.delivery_fee
    )
    return CartResponse(cart=cart, totals=totals, item_count=cart.item_count, message=message)


@router.get("", response_model=CartResponse)
async def get_cart(store: CartStore = Depends(get_cart_store)):
    """Get the current cart"""
    return cart_response(store.get_cart())


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    store: CartStore = Depends(get_cart_store),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Add one unit of a product to the cart"""
    try:
        product = await catalog.get_product(request.product_id)
    except CatalogUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = store.add_item(product)
    return cart_response(cart, message=f"Added {product.name} to cart")


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: int,
    request: UpdateCartItemRequest,
    store: CartStore = Depends(get_cart_store),
):
    """Update line quantity; zero or less removes the line"""
    if not store.get_item(product_id):
        raise HTTPException(status_code=404, detail="Item not in cart")

    cart = store.set_quantity(product_id, request.quantity)
    message = "Item removed" if request.quantity <= 0 else "Cart updated"
    return cart_response(cart, message=message)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: int,
    store: CartStore = Depends(get_cart_store),
):
    """Remove a line from the cart"""
    return cart_response(store.remove_item(product_id), message="Item removed")


@router.delete("", response_model=CartResponse)
async def clear_cart(store: CartStore = Depends(get_cart_store)):
    """Clear all items from cart"""
    return cart_response(store.clear(), message="Cart cleared")


@router.get("/images", response_model=dict[int, Optional[str]])
async def get_cart_images(
    store: CartStore = Depends(get_cart_store),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Image URL per cart line; null where no image could be resolved"""
    return await resolver.resolve_many(store.get_cart().items)
