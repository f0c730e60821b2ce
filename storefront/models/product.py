"""Product models for the storefront"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# Sentinel category meaning "no filter"
ALL_PRODUCTS = "All Products"

CATEGORIES: list[str] = [
    ALL_PRODUCTS,
    "Vegetables",
    "Meat",
    "Groceries",
    "Fruits",
    "Dairy",
    "Bakery",
    "Beverages",
]

SORT_KEYS: list[str] = ["name", "price-low", "price-high"]


class Product(BaseModel):
    """Product in the catalog (read-only, owned by the data store)"""

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: int
    name: str = ""
    category: Optional[str] = None
    price: Decimal = Decimal("0")
    final_price: Optional[Decimal] = None
    unit: str = "kg"
    description: Optional[str] = None

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("price", mode="before")
    @classmethod
    def _missing_price_as_zero(cls, value):
        return Decimal("0") if value is None else value

    @model_validator(mode="after")
    def _default_final_price(self) -> "Product":
        if self.final_price is None:
            self.final_price = self.price
        if not self.unit:
            self.unit = "kg"
        return self

    @property
    def has_discount(self) -> bool:
        return self.price != self.final_price

    @property
    def discount_percentage(self) -> int:
        """Whole-number percentage off the original price, 0 if none"""
        if self.price > 0 and self.final_price and self.price > self.final_price:
            ratio = (self.price - self.final_price) / self.price * 100
            return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return 0

    @property
    def badges(self) -> list[str]:
        badges = []
        if self.id % 5 == 0:
            badges.append("NEW")
        if self.id % 7 == 0:
            badges.append("ORGANIC")
        return badges


class ProductListResponse(BaseModel):
    """Response from product listing"""
    products: list[Product]
    total: int
    category: str = ALL_PRODUCTS
    query: Optional[str] = None
    sort: str = "name"
