"""Pytest configuration for storefront tests."""

import asyncio
from decimal import Decimal
from typing import Optional

import httpx
import pytest

from storefront.database.carts import CartStore
from storefront.database.local_storage import LocalStorage
from storefront.models.product import Product
from storefront.services.catalog_client import CatalogClient
from storefront.services.checkout import CheckoutComposer
from storefront.services.image_resolver import ImageResolver

SUPABASE_URL = "https://store.supabase.test"

CATALOG_ROWS = [
    {
        "id": 1,
        "name": "Tomatoes",
        "category": "vegetables",
        "price": 60,
        "final_price": 45,
        "unit": "kg",
        "description": "Ripe red tomatoes",
    },
    {
        "id": 2,
        "name": "apples",
        "category": "fruits",
        "price": 180,
        "final_price": 180,
        "unit": "kg",
        "description": "Crisp Shimla apples",
    },
    {
        "id": 3,
        "name": "Milk",
        "category": "dairy",
        "price": 30,
        "final_price": 30,
        "unit": "litre",
        "description": "Full cream milk",
    },
    {
        "id": 5,
        "name": "Bananas",
        "category": "Fruits",
        "price": 50,
        "final_price": 40,
        "unit": "dozen",
        "description": None,
    },
]


def make_product(
    id: int = 1,
    name: str = "Milk",
    price="30",
    final_price="30",
    unit: str = "kg",
    category: Optional[str] = "dairy",
    description: Optional[str] = None,
) -> Product:
    return Product(
        id=id,
        name=name,
        price=Decimal(str(price)),
        final_price=Decimal(str(final_price)),
        unit=unit,
        category=category,
        description=description,
    )


def supabase_handler(rows=CATALOG_ROWS):
    """httpx handler imitating the Supabase REST endpoint for the Products table"""

    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        result = list(rows)

        category = params.get("category")
        if category:
            wanted = category.split(".", 1)[1].lower()
            result = [r for r in result if (r.get("category") or "").lower() == wanted]

        product_id = params.get("id")
        if product_id:
            wanted_id = int(product_id.split(".", 1)[1])
            result = [r for r in result if r["id"] == wanted_id]

        return httpx.Response(200, json=result)

    return handler


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage"))


@pytest.fixture
def store(storage):
    return CartStore(storage)


@pytest.fixture
def catalog():
    client = CatalogClient(
        SUPABASE_URL,
        "anon-key",
        transport=httpx.MockTransport(supabase_handler()),
    )
    yield client
    asyncio.run(client.close())


@pytest.fixture
def resolver():
    resolver = ImageResolver(SUPABASE_URL, bucket="images")
    yield resolver
    asyncio.run(resolver.close())


@pytest.fixture
def dispatched():
    return []


@pytest.fixture
def composer(store, dispatched):
    return CheckoutComposer(
        cart_store=store,
        whatsapp_number="919542078141",
        dispatcher=dispatched.append,
    )
