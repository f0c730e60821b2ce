"""
Pricing Calculator

Pure functions deriving order totals from cart lines. Nothing here touches
the cart store; every function can be called any number of times.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from ..models.cart import Cart, CartLine
from ..models.checkout import OrderTotals

FREE_DELIVERY_THRESHOLD = Decimal("499")
DELIVERY_FEE = Decimal("40")
CURRENCY_SYMBOL = "₹"

_CENTS = Decimal("0.01")

CartLike = Union[Cart, Iterable[CartLine]]


def _lines(cart: CartLike) -> list[CartLine]:
    if isinstance(cart, Cart):
        return list(cart.items)
    return list(cart)


def subtotal(cart: CartLike) -> Decimal:
    """Sum of original prices"""
    return sum((line.price * line.quantity for line in _lines(cart)), Decimal("0"))


def discounted_total(cart: CartLike) -> Decimal:
    """Sum of final (discounted) prices"""
    return sum((line.final_price * line.quantity for line in _lines(cart)), Decimal("0"))


def discount(cart: CartLike) -> Decimal:
    return subtotal(cart) - discounted_total(cart)


def delivery_fee(
    cart: CartLike,
    threshold: Decimal = FREE_DELIVERY_THRESHOLD,
    fee: Decimal = DELIVERY_FEE,
) -> Decimal:
    """Flat fee unless the discounted total reaches the free-delivery threshold"""
    if discounted_total(cart) >= threshold:
        return Decimal("0")
    return fee


def grand_total(
    cart: CartLike,
    threshold: Decimal = FREE_DELIVERY_THRESHOLD,
    fee: Decimal = DELIVERY_FEE,
) -> Decimal:
    return discounted_total(cart) + delivery_fee(cart, threshold, fee)


def free_delivery_remaining(
    cart: CartLike,
    threshold: Decimal = FREE_DELIVERY_THRESHOLD,
) -> Decimal:
    """How much more must be spent to qualify for free delivery"""
    return max(Decimal("0"), threshold - discounted_total(cart))


def calculate_totals(
    cart: CartLike,
    threshold: Decimal = FREE_DELIVERY_THRESHOLD,
    fee: Decimal = DELIVERY_FEE,
) -> OrderTotals:
    """Compute every total for a cart snapshot"""
    lines = _lines(cart)
    sub = subtotal(lines)
    total = discounted_total(lines)
    shipping = delivery_fee(lines, threshold, fee)
    return OrderTotals(
        subtotal=sub,
        discounted_total=total,
        discount=sub - total,
        delivery_fee=shipping,
        grand_total=total + shipping,
        free_delivery_remaining=free_delivery_remaining(lines, threshold),
    )


def format_amount(amount: Decimal) -> str:
    """Two-decimal rendering, rounding half up"""
    return str(Decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP))


def format_currency(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{format_amount(amount)}"


def format_unit_price(amount: Decimal) -> str:
    """Plain number rendering for unit prices: 30 -> "30", 30.50 -> "30.5" """
    value = Decimal(amount)
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return format(value.normalize(), "f")
