"""
Pricing calculator - rent, security deposit and cart totals
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from core.errors import InvalidDateRange, InvalidQuantity
from models.cart import CartItem, CartTotals

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    # Quantize to 2 decimal places with HALF_UP
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def rental_days(pickup_date: date, return_date: date) -> int:
    # Both the pickup day and the return day are charged
    if return_date < pickup_date:
        raise InvalidDateRange(pickup_date, return_date)
    return (return_date - pickup_date).days + 1


def validate_quantity(quantity: int):
    if quantity is None or int(quantity) < 1:
        raise InvalidQuantity(quantity)


def item_rent(item: CartItem) -> Decimal:
    validate_quantity(item.quantity)
    days = rental_days(item.pickup_date, item.return_date)
    return to_money(Decimal(days) * item.rent_per_day * item.quantity)


def item_deposit(item: CartItem) -> Decimal:
    validate_quantity(item.quantity)
    return to_money(item.security_deposit * item.quantity)


def price_cart(items: Iterable[CartItem]) -> CartTotals:
    """Sum rent and deposit over all line items.

    Raises InvalidDateRange or InvalidQuantity for a malformed item; an
    empty cart prices to zero.
    """
    rent_total = ZERO
    deposit_total = ZERO
    for item in items:
        rent_total += item_rent(item)
        deposit_total += item_deposit(item)

    cart_total = rent_total + deposit_total
    return CartTotals(
        rent_total=rent_total,
        security_deposit_total=deposit_total,
        cart_total=cart_total,
        discount=ZERO,
        discounted_total=cart_total
    )

