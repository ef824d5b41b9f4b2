# storefront/utils/pricing.py
"""Money helpers shared by the cart summary and checkout."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from storefront.config import settings

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Coerce an amount (Decimal, int, float or str) to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price, quantity: int) -> Decimal:
    return money(money(price) * quantity)


def subtotal_of(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    """Sum of price * quantity over (price, quantity) pairs."""
    return money(sum((line_total(price, qty) for price, qty in lines), Decimal("0")))


def tax_for(subtotal: Decimal) -> Decimal:
    return money(subtotal * money(settings.TAX_RATE) / Decimal("100"))


def shipping_for(subtotal: Decimal) -> Decimal:
    threshold = money(settings.FREE_SHIPPING_THRESHOLD)
    if threshold > 0 and subtotal >= threshold:
        return Decimal("0.00")
    return money(settings.SHIPPING_FLAT_RATE)
