"""
Product Image Resolver

Maps a product's display name to the public URL of its image in object
storage. Resolution is best-effort: a missing image degrades to a
placeholder in the UI and is never reported as an error to the shopper.
"""

import asyncio
import logging
import re
from typing import Iterable, Optional
from urllib.parse import quote

import httpx

from ..core.errors import ImageUnresolved
from ..models.product import Product

logger = logging.getLogger(__name__)

_IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_image_key(name: str) -> str:
    """
    Storage key for a product name.

    "Fresh  Tomatoes.PNG" -> "fresh tomatoes"
    """
    key = name.lower()
    key = _IMAGE_EXTENSION.sub("", key)
    key = _WHITESPACE.sub(" ", key)
    return key.strip()


class ImageResolver:
    """Resolves product images from a public storage bucket"""

    def __init__(
        self,
        storage_url: str,
        bucket: str = "images",
        verify: bool = False,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            storage_url: Supabase project URL
            bucket: Public bucket holding product images
            verify: Confirm each object exists with a HEAD request
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.storage_url = storage_url.rstrip("/")
        self.bucket = bucket
        self.verify = verify
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._http_client.aclose()

    def public_url(self, key: str) -> str:
        return f"{self.storage_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    async def resolve(self, name: Optional[str]) -> str:
        """
        Get the public image URL for a product name.

        Raises:
            ImageUnresolved: if the name is empty or the object is missing
        """
        if not name:
            raise ImageUnresolved("Product has no name")

        key = normalize_image_key(name)
        if not key:
            raise ImageUnresolved(f"Empty image key for {name!r}")

        url = self.public_url(key)
        if not self.verify:
            return url

        try:
            response = await self._http_client.head(url)
        except httpx.HTTPError as e:
            raise ImageUnresolved(f"Image lookup failed for {key!r}: {e}") from e

        if response.status_code >= 400:
            raise ImageUnresolved(f"No image for {key!r} (HTTP {response.status_code})")
        return url

    async def _resolve_or_none(self, name: Optional[str]) -> Optional[str]:
        try:
            return await self.resolve(name)
        except ImageUnresolved as e:
            logger.debug(f"Falling back to placeholder: {e}")
            return None

    async def resolve_many(self, products: Iterable[Product]) -> dict[int, Optional[str]]:
        """
        Resolve images for several products concurrently.

        One task per product id; each task only produces its own entry, so a
        slow or failing lookup never affects the others.
        """
        tasks: dict[int, asyncio.Task] = {}
        for product in products:
            if product.id not in tasks:
                tasks[product.id] = asyncio.create_task(self._resolve_or_none(product.name))

        if not tasks:
            return {}

        results = await asyncio.gather(*tasks.values(), return_exceptions=True)

        urls: dict[int, Optional[str]] = {}
        for product_id, result in zip(tasks, results):
            if isinstance(result, BaseException):
                logger.debug(f"Image task for product {product_id} failed: {result!r}")
                urls[product_id] = None
            else:
                urls[product_id] = result
        return urls
