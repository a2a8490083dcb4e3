"""Money helpers for the storefront.

Internal storage unit: Decimal major units with 2 decimal places
(e.g. Decimal("185.99") AED).
Processor unit: integer minor units (fils/cents, 100 per major unit),
which is what Stripe expects for ``amount``.

Conversion chain
----------------
Major × 100 → Minor
Minor ÷ 100 → Major
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

# ─── constants ───────────────────────────────────────────────────────────────

MINOR_PER_MAJOR: int = 100
CENT = Decimal("0.01")
ZERO = Decimal("0")


# ─── conversion helpers ───────────────────────────────────────────────────────


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places (half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer minor units (round half-up)."""
    return int(
        (Decimal(amount) * MINOR_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )


def from_minor_units(minor: int) -> Decimal:
    """Convert integer minor units back to a 2dp major-unit Decimal."""
    return quantize_money(Decimal(minor) / MINOR_PER_MAJOR)


def as_number(value: Any) -> Decimal:
    """Coerce a numeric value to Decimal; anything non-numeric becomes 0.

    Mirrors the cart snapshot contract: booleans, strings, None and NaN
    are not prices.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return ZERO
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return ZERO
    if not number.is_finite():
        return ZERO
    return number


def format_money(amount: Decimal, currency: str) -> str:
    """Format for display, e.g. ``AED 185.99``."""
    return f"{currency.upper()} {quantize_money(Decimal(amount)):,.2f}"
