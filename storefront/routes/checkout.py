"""Checkout API routes for the storefront"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.errors import EmptyCartError, ValidationError
from ..models.checkout import CheckoutResponse, CustomerInfo, ValidationResponse
from ..services.checkout import CheckoutComposer
from .deps import get_checkout_composer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("/validate", response_model=ValidationResponse)
async def validate_checkout(
    info: CustomerInfo,
    composer: CheckoutComposer = Depends(get_checkout_composer),
):
    """Check customer info without placing the order"""
    errors = composer.validate(info)
    return ValidationResponse(valid=not errors, errors=errors)


@router.post("", response_model=CheckoutResponse)
async def checkout(
    info: CustomerInfo,
    composer: CheckoutComposer = Depends(get_checkout_composer),
):
    """
    Place the order.

    Returns the WhatsApp hand-off link for the client to open. The cart is
    cleared once the link has been produced; there is no confirmation from
    the messaging side.
    """
    try:
        result = composer.submit(info)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": "Please correct the highlighted fields", "errors": e.errors},
        )
    except EmptyCartError:
        raise HTTPException(status_code=400, detail="Cart is empty")

    # Next visit to checkout starts a new draft
    composer.reset()

    return CheckoutResponse(
        success=True,
        handoff_url=result.handoff_url,
        redirect_to=result.redirect_to,
    )
