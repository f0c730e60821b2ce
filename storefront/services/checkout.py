"""
Checkout Composer

Validates the customer's details, formats the order as a WhatsApp message
and hands it off through a wa.me deep link. The hand-off has no return
channel: once the link is dispatched the order counts as placed.
"""

import logging
import re
import webbrowser
from decimal import Decimal
from typing import Callable, Optional
from urllib.parse import quote

from ..core.errors import EmptyCartError, ValidationError
from ..database.carts import CartStore
from ..models.cart import Cart
from ..models.checkout import CheckoutResult, CheckoutState, CustomerInfo, OrderTotals
from . import pricing

logger = logging.getLogger(__name__)

HandoffDispatcher = Callable[[str], None]

_PHONE = re.compile(r"[0-9]{10}")


def open_in_browser(url: str) -> None:
    """Open the hand-off link in a new browser tab"""
    webbrowser.open_new_tab(url)


def validate_customer_info(info: CustomerInfo) -> dict[str, str]:
    """Field-keyed error messages; empty when the info is valid"""
    errors = {}

    if not info.name.strip():
        errors["name"] = "Name is required"

    phone = info.phone.strip()
    if not phone:
        errors["phone"] = "Phone number is required"
    elif not _PHONE.fullmatch(phone):
        errors["phone"] = "Please enter a valid 10-digit phone number"

    if not info.address.strip():
        errors["address"] = "Address is required"

    return errors


def format_order_line(name: str, quantity: int, unit_price: Decimal) -> str:
    """e.g. "Milk (2 x ₹30) = ₹60.00" """
    symbol = pricing.CURRENCY_SYMBOL
    return (
        f"{name} ({quantity} x {symbol}{pricing.format_unit_price(unit_price)}) "
        f"= {pricing.format_currency(unit_price * quantity)}"
    )


def compose_order_message(info: CustomerInfo, cart: Cart, totals: OrderTotals) -> str:
    """Human-readable order summary sent to the store"""
    order_lines = "\n".join(
        format_order_line(item.name, item.quantity, item.final_price) for item in cart.items
    )
    delivery = "FREE" if totals.free_delivery else pricing.format_currency(totals.delivery_fee)

    return (
        "*New Order*\n"
        f"*Name:* {info.name.strip()}\n"
        f"*Phone:* {info.phone.strip()}\n"
        f"*Address:* {info.address.strip()}\n"
        "\n"
        "*Order Details:*\n"
        f"{order_lines}\n"
        "\n"
        f"*Delivery Fee:* {delivery}\n"
        f"*Total Amount:* {pricing.format_currency(totals.grand_total)}\n"
    )


class CheckoutComposer:
    """
    Drives one checkout draft through
    EDITING -> VALIDATING -> INVALID | VALID -> SUBMITTING -> SUBMITTED.
    """

    def __init__(
        self,
        cart_store: CartStore,
        whatsapp_number: str,
        handoff_base_url: str = "https://wa.me",
        dispatcher: Optional[HandoffDispatcher] = None,
        free_delivery_threshold: Decimal = pricing.FREE_DELIVERY_THRESHOLD,
        delivery_fee: Decimal = pricing.DELIVERY_FEE,
    ):
        self.cart_store = cart_store
        self.whatsapp_number = whatsapp_number
        self.handoff_base_url = handoff_base_url.rstrip("/")
        self.dispatcher = dispatcher or open_in_browser
        self.free_delivery_threshold = free_delivery_threshold
        self.delivery_fee = delivery_fee
        self.state = CheckoutState.EDITING
        self.errors: dict[str, str] = {}

    def reset(self) -> None:
        """Start a fresh draft"""
        self.state = CheckoutState.EDITING
        self.errors = {}

    def totals(self, cart: Optional[Cart] = None) -> OrderTotals:
        cart = cart if cart is not None else self.cart_store.get_cart()
        return pricing.calculate_totals(cart, self.free_delivery_threshold, self.delivery_fee)

    def validate(self, info: CustomerInfo) -> dict[str, str]:
        """Validate customer info and move to VALID or INVALID"""
        self.state = CheckoutState.VALIDATING
        self.errors = validate_customer_info(info)
        self.state = CheckoutState.INVALID if self.errors else CheckoutState.VALID
        return dict(self.errors)

    def compose_message(
        self,
        info: CustomerInfo,
        cart: Cart,
        totals: Optional[OrderTotals] = None,
    ) -> str:
        return compose_order_message(info, cart, totals or self.totals(cart))

    def build_handoff_url(self, message: str) -> str:
        """wa.me deep link with the message as pre-filled text"""
        return f"{self.handoff_base_url}/{self.whatsapp_number}?text={quote(message, safe='')}"

    def submit(self, info: CustomerInfo) -> CheckoutResult:
        """
        Place the order.

        Raises:
            ValidationError: customer info is invalid; nothing is dispatched
            EmptyCartError: there is nothing to order
        """
        errors = self.validate(info)
        if errors:
            logger.info(f"Checkout rejected: invalid {', '.join(sorted(errors))}")
            raise ValidationError(errors)

        cart = self.cart_store.get_cart()
        if cart.is_empty:
            self.state = CheckoutState.EDITING
            raise EmptyCartError("Cart is empty")

        self.state = CheckoutState.SUBMITTING
        totals = self.totals(cart)
        message = self.compose_message(info, cart, totals)
        url = self.build_handoff_url(message)

        self.dispatcher(url)
        self.cart_store.clear()
        self.state = CheckoutState.SUBMITTED

        logger.info(
            f"Order handed off: {len(cart.items)} line(s), "
            f"{pricing.format_currency(totals.grand_total)}"
        )
        return CheckoutResult(handoff_url=url, message=message, redirect_to="/")
