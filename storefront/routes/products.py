"""Product API routes for the storefront"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.errors import CatalogUnavailable
from ..models.product import ALL_PRODUCTS, SORT_KEYS, Product, ProductListResponse
from ..services.catalog_client import CatalogClient, search_products, sort_products
from .deps import get_catalog_client

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    category: str = Query(ALL_PRODUCTS, description="Category filter"),
    query: Optional[str] = Query(None, description="Search query"),
    sort: str = Query("name", description="name, price-low or price-high"),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """
    List catalog products.

    Filtering by category happens in the data store; search and sort are
    applied to the fetched products.
    """
    if sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"Unknown sort key: {sort}")

    try:
        products = await catalog.list_products(category)
    except CatalogUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    products = sort_products(search_products(products, query), sort)

    return ProductListResponse(
        products=products,
        total=len(products),
        category=category,
        query=query,
        sort=sort,
    )


@router.get("/categories", response_model=list[str])
async def list_categories(catalog: CatalogClient = Depends(get_catalog_client)):
    """List storefront categories"""
    return catalog.list_categories()


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Get a product by ID"""
    try:
        product = await catalog.get_product(product_id)
    except CatalogUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
