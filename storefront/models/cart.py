"""Cart models for the storefront"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .checkout import OrderTotals
from .product import Product


class CartLine(Product):
    """A product held in the cart, with its quantity"""
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.final_price * self.quantity

    @property
    def original_line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart(BaseModel):
    """Shopping cart"""
    items: list[CartLine] = []

    def find(self, product_id: int) -> Optional[CartLine]:
        """Get the line for a product, if present"""
        return next((item for item in self.items if item.id == product_id), None)

    @property
    def item_count(self) -> int:
        """Total units across all lines"""
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


class AddToCartRequest(BaseModel):
    """Request to add one unit of a product to the cart"""
    product_id: int


class UpdateCartItemRequest(BaseModel):
    """Request to update cart line quantity (zero or less removes the line)"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    cart: Cart
    totals: OrderTotals
    item_count: int = 0
    message: Optional[str] = None
