from decimal import Decimal

import pytest

from utils.formatting import format_cents, format_currency
from utils.money import cents_to_decimal, decimal_to_cents, round_money


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("45.50"), 4_550),
        (Decimal("0.005"), 1),
        (Decimal("0.004"), 0),
        (Decimal("-5.505"), -551),
        ("12.34", 1_234),
        (7, 700),
    ],
)
def test_decimal_to_cents_rounds_half_up(amount: Decimal | str | int, expected: int) -> None:
    assert decimal_to_cents(amount) == expected


def test_decimal_to_cents_rejects_float() -> None:
    with pytest.raises(TypeError):
        decimal_to_cents(0.1)  # type: ignore[arg-type]


def test_cents_to_decimal_has_two_places() -> None:
    assert str(cents_to_decimal(30_000)) == "300.00"
    assert str(cents_to_decimal(-550)) == "-5.50"
    assert str(cents_to_decimal(1)) == "0.01"


def test_round_money() -> None:
    assert round_money(Decimal("1.005")) == Decimal("1.01")
    assert str(round_money(Decimal("2"))) == "2.00"


def test_format_currency() -> None:
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("-5.5")) == "-$5.50"
    assert format_cents(0) == "$0.00"
    assert format_cents(123_456_78) == "$123,456.78"
