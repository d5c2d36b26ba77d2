from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
# Largest amount accepted at the API boundary.
MAX_AMOUNT = Decimal("1000000000.00")


def decimal_to_cents(amount: Decimal | int | str) -> int:
    """Convert a currency amount to integer cents, rounding half-up."""
    if isinstance(amount, float):
        raise TypeError("float amounts are not accepted, use Decimal")
    value = Decimal(amount) * 100
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def cents_to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
