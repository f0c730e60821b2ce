"""Storefront error taxonomy"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for storefront errors"""
    pass


class ValidationError(StorefrontError):
    """Customer info failed validation; recoverable by re-editing the form"""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid customer info: {fields}")


class EmptyCartError(StorefrontError):
    """Checkout attempted with nothing in the cart"""
    pass


class CatalogUnavailable(StorefrontError):
    """The product catalog could not be fetched"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


class ImageUnresolved(StorefrontError):
    """No image could be resolved for a product"""
    pass


class PersistenceCorrupt(StorefrontError):
    """Persisted cart data could not be decoded"""
    pass
