"""
Catalog Client

Read-only access to the hosted Products table (Supabase REST), plus the
in-memory search and sort applied to fetched products.
"""

import logging
import unicodedata
from typing import Any, Iterable, Optional

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import CatalogUnavailable
from ..models.product import ALL_PRODUCTS, CATEGORIES, SORT_KEYS, Product

logger = logging.getLogger(__name__)

_products_adapter = TypeAdapter(list[Product])


class CatalogClient:
    """
    Client for the hosted product catalog.

    Every failure to reach or decode the data store surfaces as
    CatalogUnavailable so callers can show a retryable error state.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "Products",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize catalog client.

        Args:
            base_url: Supabase project URL
            api_key: Supabase anon key
            table: Name of the products table
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.table = table
        self._http_client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(self, params: dict[str, str]) -> list[dict[str, Any]]:
        """Query the products table"""
        url = f"{self.base_url}/rest/v1/{self.table}"

        try:
            response = await self._http_client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Catalog request failed: {e}")
            raise CatalogUnavailable("Failed to load products. Please try again later.", e) from e

        if response.status_code >= 400:
            logger.error(f"Catalog request failed: {response.status_code} - {response.text}")
            raise CatalogUnavailable(
                f"Failed to load products. Please try again later. (HTTP {response.status_code})"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogUnavailable("Catalog returned malformed data", e) from e

        if not isinstance(data, list):
            raise CatalogUnavailable("Catalog returned malformed data")
        return data

    def _parse(self, rows: list[dict[str, Any]]) -> list[Product]:
        try:
            return _products_adapter.validate_python(rows)
        except PydanticValidationError as e:
            logger.error(f"Catalog rows failed validation: {e}")
            raise CatalogUnavailable("Catalog returned malformed data", e) from e

    # ==================== Product APIs ====================

    async def list_products(self, category: str = ALL_PRODUCTS) -> list[Product]:
        """
        Fetch products, optionally limited to one category.

        Category matching is case-insensitive. The sentinel "All Products"
        (or an empty value) fetches everything.
        """
        params = {"select": "*"}
        filtered = bool(category) and category.casefold() != ALL_PRODUCTS.casefold()
        if filtered:
            params["category"] = f"ilike.{category}"

        products = self._parse(await self._request(params))

        if filtered:
            wanted = category.casefold()
            products = [p for p in products if (p.category or "").casefold() == wanted]

        logger.debug(f"Fetched {len(products)} product(s) for category '{category}'")
        return products

    async def get_product(self, product_id: int) -> Optional[Product]:
        """Get a product by ID, or None if it does not exist"""
        rows = await self._request({"select": "*", "id": f"eq.{product_id}", "limit": "1"})
        products = self._parse(rows)
        return products[0] if products else None

    def list_categories(self) -> list[str]:
        """Storefront category tabs, starting with the no-filter sentinel"""
        return list(CATEGORIES)


def search_products(products: Iterable[Product], query: Optional[str]) -> list[Product]:
    """Case-insensitive substring match on name and description"""
    products = list(products)
    if not query:
        return products

    needle = query.casefold()
    return [
        p for p in products
        if needle in (p.name or "").casefold() or needle in (p.description or "").casefold()
    ]


def _collation_key(name: Optional[str]) -> tuple[str, str]:
    text = name or ""
    folded = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    return folded, text


def sort_products(products: Iterable[Product], key: str = "name") -> list[Product]:
    """
    Sort products for display. Python's sort is stable, so equal keys keep
    their fetched order.

    Raises:
        ValueError: if key is not one of SORT_KEYS
    """
    products = list(products)
    if key == "name":
        return sorted(products, key=lambda p: _collation_key(p.name))
    if key == "price-low":
        return sorted(products, key=lambda p: p.price or 0)
    if key == "price-high":
        return sorted(products, key=lambda p: p.price or 0, reverse=True)
    raise ValueError(f"Unknown sort key: {key} (expected one of {SORT_KEYS})")
