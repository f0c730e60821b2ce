"""Checkout models for the storefront"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class CheckoutState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    INVALID = "invalid"
    VALID = "valid"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class CustomerInfo(BaseModel):
    """Customer contact details for one checkout draft (never persisted)"""
    name: str = ""
    phone: str = ""
    address: str = ""


class OrderTotals(BaseModel):
    """Totals derived from a cart"""
    subtotal: Decimal
    discounted_total: Decimal
    discount: Decimal
    delivery_fee: Decimal
    grand_total: Decimal
    free_delivery_remaining: Decimal = Decimal("0")

    @property
    def free_delivery(self) -> bool:
        return self.delivery_fee == 0


class ValidationResponse(BaseModel):
    """Response from customer info validation"""
    valid: bool
    errors: dict[str, str] = {}


class CheckoutResult(BaseModel):
    """Outcome of a dispatched order hand-off"""
    handoff_url: str
    message: str
    redirect_to: str = "/"


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    handoff_url: Optional[str] = None
    redirect_to: Optional[str] = None
    errors: dict[str, str] = {}
    error_message: Optional[str] = None
