"""
FreshCart Storefront

Grocery catalog, cart and WhatsApp checkout served as a FastAPI app.
Products and images come from a hosted Supabase project; the cart is kept
in local durable storage.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv(os.path.join(os.getcwd(), "config", ".env"))

from .core.config import settings
from .models.cart import Cart
from .routes import products_router, cart_router, checkout_router, pages_router
from .routes.deps import get_cart_store, close_clients

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def log_cart_change(cart: Cart) -> None:
    """Cart listener: record the new cart size"""
    logger.debug(f"Cart now holds {len(cart.items)} line(s), {cart.item_count} unit(s)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Data store: {settings.supabase_url} (configured: {settings.supabase_configured})")
    logger.info(f"Cart storage: {settings.storage_dir}")

    store = get_cart_store()
    store.subscribe(log_cart_change)

    yield

    logger.info(f"{settings.app_name} shutting down...")
    store.unsubscribe(log_cart_change)
    await close_clients()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Grocery delivery storefront with WhatsApp checkout",
    version="1.0.0",
    lifespan=lifespan,
)

# Static files
static_dir = os.path.join(os.path.dirname(__file__), "static")

if os.path.exists(static_dir):
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

# Include routers
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(pages_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront",
        "data_store_configured": settings.supabase_configured,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
