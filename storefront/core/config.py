"""Storefront Configuration"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "FreshCart"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Hosted data store (Supabase)
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""
    products_table: str = "Products"
    image_bucket: str = "images"
    verify_images: bool = False
    request_timeout: float = 30.0

    # Local cart persistence
    storage_dir: str = ".freshcart"
    cart_storage_key: str = "cart"

    # Order hand-off
    whatsapp_number: str = "919542078141"  # country code + number, no "+"
    handoff_base_url: str = "https://wa.me"

    # Pricing
    free_delivery_threshold: Decimal = Decimal("499")
    delivery_fee: Decimal = Decimal("40")

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        env_prefix = "FRESHCART_"
        case_sensitive = False
        extra = "ignore"

    @property
    def supabase_configured(self) -> bool:
        """Check if data store credentials are configured"""
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
