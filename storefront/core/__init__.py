# Core modules

from .config import settings, get_settings, Settings
from .errors import (
    StorefrontError,
    ValidationError,
    EmptyCartError,
    CatalogUnavailable,
    ImageUnresolved,
    PersistenceCorrupt,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "StorefrontError",
    "ValidationError",
    "EmptyCartError",
    "CatalogUnavailable",
    "ImageUnresolved",
    "PersistenceCorrupt",
]
