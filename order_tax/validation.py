"""
Input checks for callers of the calculation engine.

The engine accepts whatever numbers it is given. Order entry, POS
import and the CLI call validate_order_line first and report
InvalidTaxInput to their users.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from order_tax.exceptions import InvalidTaxInput
from order_tax.rates import Number, is_valid_tax_rate, to_decimal


def validate_amount(name: str, value: Number) -> Decimal:
    """Return a non-negative finite amount as Decimal, or raise."""
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError) as e:
        raise InvalidTaxInput(f"{name} is not a number: {value!r}") from e
    if not amount.is_finite():
        raise InvalidTaxInput(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidTaxInput(f"{name} must not be negative, got {value!r}")
    return amount


def validate_tax_rate(rate: Number) -> Decimal:
    """Return the rate as Decimal, or raise if outside 0..100."""
    try:
        value = to_decimal(rate)
    except (InvalidOperation, ValueError) as e:
        raise InvalidTaxInput(f"Tax rate is not a number: {rate!r}") from e
    if not is_valid_tax_rate(value):
        raise InvalidTaxInput(f"Tax rate must be between 0 and 100, got {rate}")
    return value


def validate_order_line(
    quantity: Number,
    unit_price: Number,
    tax_rate_override: Optional[Number] = None,
) -> tuple[Decimal, Decimal, Optional[Decimal]]:
    """
    Check one order line before it reaches the engine.

    Returns (quantity, unit_price, tax_rate_override) as Decimals.
    """
    qty = validate_amount("Quantity", quantity)
    price = validate_amount("Unit price", unit_price)
    override = (
        None if tax_rate_override is None else validate_tax_rate(tax_rate_override)
    )
    return qty, price, override
