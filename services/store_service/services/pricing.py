"""Checkout pricing: discounted line prices, subtotal, shipping, total."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.config import get_settings
from libs.common.currency import ZERO, as_number, quantize_money


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal


def discounted_unit_price(price, discount) -> Decimal:
    """Unit price after a fractional discount in [0, 1], rounded to 2dp."""
    return quantize_money(as_number(price) * (1 - as_number(discount)))


def line_subtotal(price, discount, quantity) -> Decimal:
    """Charged amount for one cart line: price × (1 − discount) × quantity.

    Only the line amount is rounded; the unit price is not rounded first.
    """
    return quantize_money(
        as_number(price) * (1 - as_number(discount)) * as_number(quantity)
    )


def checkout_subtotal(lines: Iterable) -> Decimal:
    """Sum of rounded line amounts; what checkout charges and orders record."""
    return sum_subtotals(
        line_subtotal(line.price, line.discount, line.quantity) for line in lines
    )


def shipping_for(
    subtotal: Decimal,
    threshold: Optional[Decimal] = None,
    flat_fee: Optional[Decimal] = None,
) -> Decimal:
    """Flat fee unless the subtotal is above the free-shipping threshold.

    An empty cart ships nothing, so it is never charged the fee.
    """
    settings = get_settings()
    threshold = settings.FREE_SHIPPING_THRESHOLD if threshold is None else threshold
    flat_fee = settings.FLAT_SHIPPING_FEE if flat_fee is None else flat_fee
    if subtotal <= ZERO or subtotal > threshold:
        return ZERO
    return quantize_money(flat_fee)


def compute_checkout_totals(
    subtotal: Decimal, discount: Decimal = ZERO
) -> CheckoutTotals:
    subtotal = quantize_money(subtotal)
    shipping = shipping_for(subtotal)
    total = quantize_money(subtotal + shipping - discount)
    return CheckoutTotals(
        subtotal=subtotal, shipping=shipping, discount=discount, total=total
    )


def sum_subtotals(subtotals: Iterable[Decimal]) -> Decimal:
    return quantize_money(sum(subtotals, ZERO))
