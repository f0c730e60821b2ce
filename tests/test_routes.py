"""Tests for the storefront API and pages."""

import asyncio
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.main import app
from storefront.routes.deps import (
    get_cart_store,
    get_catalog_client,
    get_checkout_composer,
    get_image_resolver,
)
from storefront.services.catalog_client import CatalogClient

from .conftest import SUPABASE_URL


@pytest.fixture
def client(store, catalog, resolver, composer):
    app.dependency_overrides[get_cart_store] = lambda: store
    app.dependency_overrides[get_catalog_client] = lambda: catalog
    app.dependency_overrides[get_image_resolver] = lambda: resolver
    app.dependency_overrides[get_checkout_composer] = lambda: composer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def offline_catalog(client):
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    catalog = CatalogClient(SUPABASE_URL, "anon-key", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_catalog_client] = lambda: catalog
    yield catalog
    asyncio.run(catalog.close())


class TestProductsAPI:
    """Tests for /api/products."""

    def test_list_sorted_by_name(self, client):
        response = client.get("/api/products")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert [p["name"] for p in data["products"]] == ["apples", "Bananas", "Milk", "Tomatoes"]

    def test_category_search_and_sort(self, client):
        response = client.get("/api/products", params={"category": "Fruits", "sort": "price-high"})

        assert [p["id"] for p in response.json()["products"]] == [2, 5]

        response = client.get("/api/products", params={"query": "RIPE"})

        assert [p["id"] for p in response.json()["products"]] == [1]

    def test_unknown_sort(self, client):
        assert client.get("/api/products", params={"sort": "rating"}).status_code == 400

    def test_catalog_unavailable(self, client, offline_catalog):
        response = client.get("/api/products")

        assert response.status_code == 503

    def test_categories(self, client):
        categories = client.get("/api/products/categories").json()

        assert categories[0] == "All Products"
        assert "Vegetables" in categories

    def test_get_product(self, client):
        response = client.get("/api/products/3")

        assert response.status_code == 200
        assert response.json()["name"] == "Milk"

    def test_get_missing_product(self, client):
        assert client.get("/api/products/999").status_code == 404


class TestCartAPI:
    """Tests for /api/cart."""

    def test_add_and_increment(self, client):
        client.post("/api/cart/items", json={"product_id": 1})
        response = client.post("/api/cart/items", json={"product_id": 1})

        assert response.status_code == 200
        data = response.json()
        assert len(data["cart"]["items"]) == 1
        assert data["cart"]["items"][0]["quantity"] == 2
        assert data["item_count"] == 2
        assert Decimal(data["totals"]["discounted_total"]) == Decimal("90")
        assert Decimal(data["totals"]["grand_total"]) == Decimal("130")

    def test_add_unknown_product(self, client):
        assert client.post("/api/cart/items", json={"product_id": 999}).status_code == 404

    def test_update_quantity(self, client):
        client.post("/api/cart/items", json={"product_id": 3})

        response = client.put("/api/cart/items/3", json={"quantity": 5})

        assert response.json()["cart"]["items"][0]["quantity"] == 5

    def test_zero_quantity_removes(self, client):
        client.post("/api/cart/items", json={"product_id": 3})

        response = client.put("/api/cart/items/3", json={"quantity": 0})

        assert response.json()["cart"]["items"] == []

    def test_update_item_not_in_cart(self, client):
        assert client.put("/api/cart/items/3", json={"quantity": 2}).status_code == 404

    def test_remove_and_clear(self, client):
        client.post("/api/cart/items", json={"product_id": 1})
        client.post("/api/cart/items", json={"product_id": 2})

        response = client.delete("/api/cart/items/1")
        assert [item["id"] for item in response.json()["cart"]["items"]] == [2]

        response = client.delete("/api/cart")
        assert response.json()["cart"]["items"] == []

    def test_images(self, client):
        client.post("/api/cart/items", json={"product_id": 1})

        images = client.get("/api/cart/images").json()

        assert images == {"1": f"{SUPABASE_URL}/storage/v1/object/public/images/tomatoes"}


class TestCheckoutAPI:
    """Tests for /api/checkout."""

    def test_validate(self, client):
        response = client.post("/api/checkout/validate", json={"name": "", "phone": "12", "address": ""})

        data = response.json()
        assert data["valid"] is False
        assert set(data["errors"]) == {"name", "phone", "address"}

    def test_invalid_checkout(self, client, dispatched):
        client.post("/api/cart/items", json={"product_id": 1})

        response = client.post("/api/checkout", json={"name": "", "phone": "12345", "address": "x"})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"]["phone"] == "Please enter a valid 10-digit phone number"
        assert dispatched == []

    def test_empty_cart(self, client):
        response = client.post(
            "/api/checkout", json={"name": "A", "phone": "9876543210", "address": "x"}
        )

        assert response.status_code == 400

    def test_successful_checkout(self, client, store):
        client.post("/api/cart/items", json={"product_id": 3})
        client.post("/api/cart/items", json={"product_id": 3})

        response = client.post(
            "/api/checkout", json={"name": "Asha", "phone": "9876543210", "address": "MG Road"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["redirect_to"] == "/"
        text = parse_qs(urlparse(data["handoff_url"]).query)["text"][0]
        assert "Milk (2 x ₹30) = ₹60.00" in text
        assert store.get_cart().is_empty


class TestPages:
    """Tests for the HTML pages."""

    def test_home(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "Tomatoes" in response.text
        assert "25% OFF" in response.text

    def test_home_catalog_error(self, client, offline_catalog):
        response = client.get("/")

        assert response.status_code == 503
        assert "Try again" in response.text

    def test_product_page(self, client):
        response = client.get("/product/5")

        assert response.status_code == 200
        assert "Bananas" in response.text
        assert "NEW" in response.text

    def test_missing_product_page(self, client):
        response = client.get("/product/999")

        assert response.status_code == 404
        assert "Product not found" in response.text

    def test_add_redirects_back(self, client, store):
        response = client.post("/cart/add/2?next=/product/2", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/product/2"
        assert store.get_cart().item_count == 1

    def test_add_returns_to_filtered_catalog(self, client):
        page = client.get("/", params={"category": "Fruits", "sort": "price-high"})

        assert "next=/%3Fcategory%3DFruits%26sort%3Dprice-high" in page.text

        response = client.post(
            "/cart/add/2",
            params={"next": "/?category=Fruits&sort=price-high"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/?category=Fruits&sort=price-high"

    def test_add_ignores_offsite_next(self, client):
        response = client.post("/cart/add/2?next=//evil.example", follow_redirects=False)

        assert response.headers["location"] == "/"

    def test_empty_checkout_page(self, client):
        response = client.get("/checkout")

        assert "Your Cart is Empty" in response.text

    def test_checkout_page_shows_totals(self, client):
        client.post("/api/cart/items", json={"product_id": 1})

        response = client.get("/checkout")

        assert "Payment Summary" in response.text
        assert "₹85.00" in response.text
        assert "Add ₹454.00 more for free delivery" in response.text

    def test_checkout_form_errors(self, client):
        client.post("/api/cart/items", json={"product_id": 1})

        response = client.post("/checkout", data={"name": "", "phone": "abc", "address": ""})

        assert response.status_code == 422
        assert "Name is required" in response.text
        assert "Please enter a valid 10-digit phone number" in response.text
        assert "Address is required" in response.text

    def test_checkout_form_success(self, client, store, dispatched):
        client.post("/api/cart/items", json={"product_id": 1})

        response = client.post(
            "/checkout", data={"name": "Asha", "phone": "9876543210", "address": "MG Road"}
        )

        assert response.status_code == 200
        assert "https://wa.me/919542078141?text=" in response.text
        assert len(dispatched) == 1
        assert store.get_cart().is_empty

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
