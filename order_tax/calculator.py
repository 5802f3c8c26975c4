"""
Order tax calculation engine.

Handles:
- Tax amount for a subtotal at a rate (tax-exclusive and tax-inclusive)
- Line totals (quantity x unit price at the resolved rate)
- Order aggregation with a per-rate breakdown
- Reverse calculation from a tax-inclusive price

Every function here is pure: inputs in, fresh result out. Degenerate
amounts (non-positive subtotal or rate) give zero tax rather than an
error; validating caller input is the job of order_tax.validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import (
    ROUND_CEILING,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Decimal,
    localcontext,
)
from typing import Any, Iterable, Mapping, Optional, Union

from order_tax.rates import Number, format_tax_rate, to_decimal
from order_tax.resolver import Customer, Product, resolve_rate
from order_tax.settings import (
    DEFAULT_GLOBAL_TAX_SETTINGS,
    CalculationMethod,
    GlobalTaxSettings,
    RoundingMethod,
)

_ROUNDING_MODES: dict[RoundingMethod, str] = {
    RoundingMethod.ROUND: ROUND_HALF_UP,
    RoundingMethod.FLOOR: ROUND_FLOOR,
    RoundingMethod.CEIL: ROUND_CEILING,
}

_HUNDRED = Decimal("100")


@dataclass
class LineTotals:
    """Subtotal, tax and total for one amount at one rate."""

    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    method: CalculationMethod


@dataclass
class OrderLine:
    """A single order line as submitted by order entry."""

    quantity: Decimal
    unit_price: Decimal
    product: Optional[Product] = None
    tax_rate_override: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderLine":
        unit_price = data.get("unit_price", data.get("unitPrice"))
        override = data.get("tax_rate_override", data.get("taxRateOverride"))
        product = data.get("product")
        if isinstance(product, Mapping):
            product = Product.from_dict(dict(product))
        return cls(
            quantity=to_decimal(data["quantity"]),
            unit_price=to_decimal(unit_price),
            product=product,
            tax_rate_override=(
                None if override is None else to_decimal(override)
            ),
        )


@dataclass
class RateBreakdown:
    """Tax contributed by all lines at one rate."""

    rate: Decimal
    amount: Decimal
    items: int
    label: str


@dataclass
class OrderTaxBreakdown:
    """Aggregated tax for an order."""

    subtotal: Decimal
    total_tax: Decimal
    total: Decimal
    breakdown: list[RateBreakdown]
    lines: list[LineTotals] = field(default_factory=list)


@dataclass
class ReverseTaxResult:
    """Subtotal and tax recovered from a tax-inclusive price."""

    subtotal: Decimal
    tax_amount: Decimal
    tax_rate: Decimal


def _method(method: Union[CalculationMethod, str]) -> CalculationMethod:
    return CalculationMethod(method) if isinstance(method, str) else method


def _rounding(rounding: Union[RoundingMethod, str]) -> RoundingMethod:
    return RoundingMethod(rounding) if isinstance(rounding, str) else rounding


def _round(
    amount: Decimal,
    precision: int,
    rounding: RoundingMethod = RoundingMethod.ROUND,
) -> Decimal:
    """Round to the given number of decimal places."""
    # quantize needs room for every integer digit plus the decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + precision + 2)
        return amount.quantize(
            Decimal(1).scaleb(-precision), rounding=_ROUNDING_MODES[rounding]
        )


def calculate_tax(
    subtotal: Number,
    rate: Number,
    method: Union[CalculationMethod, str] = CalculationMethod.EXCLUSIVE,
    rounding_method: Union[RoundingMethod, str] = RoundingMethod.ROUND,
    precision: int = 2,
) -> Decimal:
    """
    Calculate the tax on a subtotal at a percentage rate.

    For the inclusive method the subtotal already contains the tax and
    the embedded portion is extracted. Rounding is applied once, to the
    final amount.
    """
    amount = to_decimal(subtotal)
    pct = to_decimal(rate)
    if pct <= 0 or amount <= 0:
        return _round(Decimal("0"), precision)

    if _method(method) == CalculationMethod.INCLUSIVE:
        raw = amount - amount / (1 + pct / _HUNDRED)
    else:
        raw = amount * pct / _HUNDRED

    return _round(raw, precision, _rounding(rounding_method))


def calculate_totals(
    subtotal: Number,
    tax_rate: Number,
    method: Union[CalculationMethod, str] = CalculationMethod.EXCLUSIVE,
    rounding_method: Union[RoundingMethod, str] = RoundingMethod.ROUND,
    precision: int = 2,
) -> LineTotals:
    """
    Calculate subtotal, tax and total for an amount.

    Subtotal and total are rounded half up at the given precision so
    they can be summed and displayed as-is.
    """
    amount = to_decimal(subtotal)
    method = _method(method)
    tax_amount = calculate_tax(
        amount, tax_rate, method, rounding_method, precision
    )

    if method == CalculationMethod.INCLUSIVE:
        total = amount
    else:
        total = amount + tax_amount

    return LineTotals(
        subtotal=_round(amount, precision),
        tax_rate=to_decimal(tax_rate),
        tax_amount=tax_amount,
        total=_round(total, precision),
        method=method,
    )


def calculate_line_item_totals(
    quantity: Number,
    unit_price: Number,
    product: Optional[Product] = None,
    customer: Optional[Customer] = None,
    tax_rate_override: Optional[Number] = None,
    settings: Optional[GlobalTaxSettings] = None,
    method: Optional[Union[CalculationMethod, str]] = None,
) -> LineTotals:
    """
    Calculate totals for one order line.

    The rate is resolved from the override, customer, product and
    settings; the method defaults to the configured calculation method.
    """
    settings = settings or DEFAULT_GLOBAL_TAX_SETTINGS
    line_subtotal = to_decimal(quantity) * to_decimal(unit_price)
    rate = resolve_rate(product, customer, tax_rate_override, settings)

    return calculate_totals(
        line_subtotal,
        rate,
        method=method or settings.tax_calculation_method,
        rounding_method=settings.rounding_method,
        precision=settings.rounding_precision,
    )


def calculate_order_tax_breakdown(
    items: Iterable[Union[OrderLine, Mapping[str, Any]]],
    customer: Optional[Customer] = None,
    settings: Optional[GlobalTaxSettings] = None,
) -> OrderTaxBreakdown:
    """
    Calculate order totals with tax grouped by effective rate.

    Breakdown entries appear in the order their rate is first seen in
    the input, not sorted by rate.
    """
    settings = settings or DEFAULT_GLOBAL_TAX_SETTINGS
    total_subtotal = Decimal("0")
    total_tax = Decimal("0")
    by_rate: dict[Decimal, list] = {}
    lines: list[LineTotals] = []

    for item in items:
        line = item if isinstance(item, OrderLine) else OrderLine.from_dict(item)
        totals = calculate_line_item_totals(
            line.quantity,
            line.unit_price,
            product=line.product,
            customer=customer,
            tax_rate_override=line.tax_rate_override,
            settings=settings,
        )
        lines.append(totals)
        total_subtotal += totals.subtotal
        total_tax += totals.tax_amount

        # Equal Decimals hash equal, so 11 and 11.0 share a bucket
        bucket = by_rate.setdefault(totals.tax_rate, [Decimal("0"), 0])
        bucket[0] += totals.tax_amount
        bucket[1] += 1

    breakdown = [
        RateBreakdown(
            rate=rate,
            amount=amount,
            items=count,
            label=format_tax_rate(rate, verbose=True),
        )
        for rate, (amount, count) in by_rate.items()
    ]

    return OrderTaxBreakdown(
        subtotal=total_subtotal,
        total_tax=total_tax,
        total=total_subtotal + total_tax,
        breakdown=breakdown,
        lines=lines,
    )


def calculate_reverse_tax(
    total_inclusive_price: Number,
    tax_rate: Number,
    rounding_method: Union[RoundingMethod, str] = RoundingMethod.ROUND,
    precision: int = 2,
) -> ReverseTaxResult:
    """
    Split a tax-inclusive price into subtotal and tax.

    A non-positive rate returns the price untouched with zero tax, and
    reports the rate as 0 whatever was passed in.
    """
    total = to_decimal(total_inclusive_price)
    pct = to_decimal(tax_rate)
    if pct <= 0:
        return ReverseTaxResult(
            subtotal=total, tax_amount=Decimal("0"), tax_rate=Decimal("0")
        )

    rounding = _rounding(rounding_method)
    subtotal = total / (1 + pct / _HUNDRED)
    tax_amount = total - subtotal

    return ReverseTaxResult(
        subtotal=_round(subtotal, precision, rounding),
        tax_amount=_round(tax_amount, precision, rounding),
        tax_rate=pct,
    )


class TaxCalculator:
    """
    Tax calculation bound to one settings value.

    Convenience for callers that run many calculations with the same
    configuration. Holds nothing but the (immutable) settings.
    """

    def __init__(self, settings: Optional[GlobalTaxSettings] = None) -> None:
        self.settings = settings or DEFAULT_GLOBAL_TAX_SETTINGS

    def rate_for(
        self,
        product: Optional[Product] = None,
        customer: Optional[Customer] = None,
        override_rate: Optional[Number] = None,
    ) -> Decimal:
        return resolve_rate(product, customer, override_rate, self.settings)

    def totals(
        self,
        subtotal: Number,
        tax_rate: Number,
        method: Optional[Union[CalculationMethod, str]] = None,
    ) -> LineTotals:
        return calculate_totals(
            subtotal,
            tax_rate,
            method=method or self.settings.tax_calculation_method,
            rounding_method=self.settings.rounding_method,
            precision=self.settings.rounding_precision,
        )

    def line(
        self,
        quantity: Number,
        unit_price: Number,
        product: Optional[Product] = None,
        customer: Optional[Customer] = None,
        tax_rate_override: Optional[Number] = None,
        method: Optional[Union[CalculationMethod, str]] = None,
    ) -> LineTotals:
        return calculate_line_item_totals(
            quantity,
            unit_price,
            product=product,
            customer=customer,
            tax_rate_override=tax_rate_override,
            settings=self.settings,
            method=method,
        )

    def order(
        self,
        items: Iterable[Union[OrderLine, Mapping[str, Any]]],
        customer: Optional[Customer] = None,
    ) -> OrderTaxBreakdown:
        return calculate_order_tax_breakdown(items, customer, self.settings)

    def reverse(
        self, total_inclusive_price: Number, tax_rate: Number
    ) -> ReverseTaxResult:
        return calculate_reverse_tax(
            total_inclusive_price,
            tax_rate,
            rounding_method=self.settings.rounding_method,
            precision=self.settings.rounding_precision,
        )
