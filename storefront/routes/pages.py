"""Storefront HTML pages"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..core.config import settings
from ..core.errors import CatalogUnavailable, EmptyCartError, ImageUnresolved, ValidationError
from ..database.carts import CartStore
from ..models.checkout import CustomerInfo
from ..models.product import ALL_PRODUCTS, SORT_KEYS
from ..services import pricing
from ..services.catalog_client import CatalogClient, search_products, sort_products
from ..services.checkout import CheckoutComposer
from ..services.image_resolver import ImageResolver
from .deps import get_cart_store, get_catalog_client, get_checkout_composer, get_image_resolver

logger = logging.getLogger(__name__)

templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=templates_dir)
templates.env.filters["currency"] = pricing.format_currency
templates.env.filters["unit_price"] = pricing.format_unit_price

router = APIRouter(tags=["Pages"])


def _safe_next(next_url: Optional[str]) -> str:
    """Only follow local redirects"""
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/"


def _render(request: Request, name: str, store: CartStore, status_code: int = 200, **context):
    context.setdefault("app_name", settings.app_name)
    context.setdefault("cart_count", store.get_cart().item_count)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    category: str = Query(ALL_PRODUCTS),
    query: str = Query(""),
    sort: str = Query("name"),
    store: CartStore = Depends(get_cart_store),
    catalog: CatalogClient = Depends(get_catalog_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Catalog page"""
    if sort not in SORT_KEYS:
        sort = "name"

    products, images, error = [], {}, None
    try:
        products = await catalog.list_products(category)
    except CatalogUnavailable as e:
        error = str(e)

    if not error:
        products = sort_products(search_products(products, query), sort)
        images = await resolver.resolve_many(products)

    return _render(
        request,
        "index.html",
        store,
        status_code=503 if error else 200,
        categories=catalog.list_categories(),
        category=category,
        query=query,
        sort=sort,
        products=products,
        images=images,
        error=error,
        threshold=settings.free_delivery_threshold,
    )


@router.get("/product/{product_id}", response_class=HTMLResponse)
async def product_page(
    request: Request,
    product_id: int,
    store: CartStore = Depends(get_cart_store),
    catalog: CatalogClient = Depends(get_catalog_client),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    """Product detail page"""
    product, image_url, error = None, None, None
    try:
        product = await catalog.get_product(product_id)
    except CatalogUnavailable as e:
        error = str(e)

    status_code = 200
    if product:
        try:
            image_url = await resolver.resolve(product.name)
        except ImageUnresolved as e:
            logger.debug(f"No image for product {product_id}: {e}")
    elif error:
        status_code = 503
    else:
        error = "Product not found"
        status_code = 404

    return _render(
        request,
        "product.html",
        store,
        status_code=status_code,
        product=product,
        image_url=image_url,
        error=error,
        threshold=settings.free_delivery_threshold,
    )


@router.post("/cart/add/{product_id}")
async def add_to_cart_form(
    product_id: int,
    next: Optional[str] = Query(None),
    store: CartStore = Depends(get_cart_store),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Add one unit, then return to the page the shopper came from"""
    try:
        product = await catalog.get_product(product_id)
    except CatalogUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    store.add_item(product)
    return RedirectResponse(_safe_next(next), status_code=303)


@router.post("/cart/update/{product_id}")
async def update_cart_form(
    product_id: int,
    quantity: int = Query(...),
    store: CartStore = Depends(get_cart_store),
):
    store.set_quantity(product_id, quantity)
    return RedirectResponse("/checkout", status_code=303)


@router.post("/cart/remove/{product_id}")
async def remove_from_cart_form(
    product_id: int,
    store: CartStore = Depends(get_cart_store),
):
    store.remove_item(product_id)
    return RedirectResponse("/checkout", status_code=303)


async def _checkout_context(store: CartStore, resolver: ImageResolver, composer: CheckoutComposer):
    cart = store.get_cart()
    return {
        "cart": cart,
        "totals": composer.totals(cart),
        "images": await resolver.resolve_many(cart.items),
        "threshold": composer.free_delivery_threshold,
    }


@router.get("/checkout", response_class=HTMLResponse)
async def checkout_page(
    request: Request,
    store: CartStore = Depends(get_cart_store),
    resolver: ImageResolver = Depends(get_image_resolver),
    composer: CheckoutComposer = Depends(get_checkout_composer),
):
    """Cart, customer form and payment summary"""
    context = await _checkout_context(store, resolver, composer)
    return _render(request, "checkout.html", store, info=CustomerInfo(), errors={}, **context)


@router.post("/checkout", response_class=HTMLResponse)
async def submit_checkout(
    request: Request,
    name: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    store: CartStore = Depends(get_cart_store),
    resolver: ImageResolver = Depends(get_image_resolver),
    composer: CheckoutComposer = Depends(get_checkout_composer),
):
    """Place the order from the checkout form"""
    info = CustomerInfo(name=name, phone=phone, address=address)
    try:
        result = composer.submit(info)
    except ValidationError as e:
        context = await _checkout_context(store, resolver, composer)
        return _render(
            request, "checkout.html", store, status_code=422, info=info, errors=e.errors, **context
        )
    except EmptyCartError:
        return RedirectResponse("/checkout", status_code=303)

    composer.reset()
    return _render(
        request,
        "order_placed.html",
        store,
        handoff_url=result.handoff_url,
        redirect_to=result.redirect_to,
    )
