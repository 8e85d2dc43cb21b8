"""
Order pricing.

All arithmetic is done on integer cents and `Decimal`; nothing touches binary
floats. Each charge is rounded half-up to whole cents on its own and the
total is the sum of the rounded parts, so stored figures always add up.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

DEFAULT_TAX_RATE = Decimal("0.0825")
DEFAULT_SERVICE_CHARGE_RATE = Decimal("0.05")

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal_cents: int
    tax_cents: int
    service_charge_cents: int
    total_cents: int


def _round_cents(amount_cents: Decimal) -> int:
    return int(amount_cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_totals(
    lines: Iterable[tuple[int, int]],
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    service_charge_rate: Decimal = DEFAULT_SERVICE_CHARGE_RATE,
) -> PriceBreakdown:
    """
    Price a list of (unit_price_cents, quantity) lines.

    Empty input gives an all-zero breakdown.
    """
    subtotal = sum(price_cents * quantity for price_cents, quantity in lines)
    tax = _round_cents(Decimal(subtotal) * tax_rate)
    service_charge = _round_cents(Decimal(subtotal) * service_charge_rate)
    return PriceBreakdown(
        subtotal_cents=subtotal,
        tax_cents=tax,
        service_charge_cents=service_charge,
        total_cents=subtotal + tax + service_charge,
    )


def to_cents(amount: Decimal | str | int | float) -> int:
    """
    Parse a money amount ("16.50", Decimal("16.5"), 16) into cents.

    Raises ValueError for negative amounts or more than two decimal places.
    """
    try:
        # str() first so floats coming from JSON keep their literal digits
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid money amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid money amount: {amount!r}")
    if value < 0:
        raise ValueError("Money amounts cannot be negative")
    if value != value.quantize(_CENT):
        raise ValueError("Money amounts have at most two decimal places")
    return int(value * 100)


def format_cents(cents: int) -> str:
    """Render cents as a fixed-point string: 1650 -> "16.50"."""
    return str((Decimal(cents) / 100).quantize(_CENT))
