from __future__ import annotations

from decimal import Decimal

from utils.money import cents_to_decimal


def format_currency(value: Decimal) -> str:
    cents = value.quantize(Decimal("0.01"))
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents):,.2f}"


def format_cents(cents: int) -> str:
    return format_currency(cents_to_decimal(cents))
