"""Tests for caller-side input validation."""

from decimal import Decimal

import pytest

from order_tax.exceptions import InvalidTaxInput
from order_tax.validation import (
    validate_amount,
    validate_order_line,
    validate_tax_rate,
)


def test_valid_line_converts_to_decimal():
    qty, price, override = validate_order_line(5, "20000", 11)
    assert qty == Decimal("5")
    assert price == Decimal("20000")
    assert override == Decimal("11")


def test_override_optional():
    assert validate_order_line(1, 1)[2] is None


def test_zero_values_allowed():
    assert validate_order_line(0, 0, 0) == (0, 0, 0)


@pytest.mark.parametrize(
    "quantity, price, override",
    [
        (-1, 100, None),
        (1, -0.01, None),
        ("abc", 100, None),
        (float("inf"), 100, None),
        (1, float("nan"), None),
        (1, 100, 101),
        (1, 100, -1),
        (1, 100, "x"),
    ],
)
def test_invalid_lines(quantity, price, override):
    with pytest.raises(InvalidTaxInput):
        validate_order_line(quantity, price, override)


def test_invalid_input_is_value_error():
    with pytest.raises(ValueError, match="Quantity"):
        validate_amount("Quantity", -3)


def test_validate_tax_rate_bounds():
    assert validate_tax_rate("100") == 100
    with pytest.raises(InvalidTaxInput, match="between 0 and 100"):
        validate_tax_rate(100.01)
