"""
Effective tax rate resolution.

Decides which rate applies to an order line. Candidate rates are
checked in a fixed order and the first one that applies wins:

1. An explicit override on the line (zero included)
2. Customer exemption (rate 0)
3. Customer rate override
4. Product-specific rate
5. The system default rate

Steps 2-3 are gated by ``allow_customer_exemption`` and step 4 by
``allow_product_override``. Resolution never raises: absent records or
fields fall through to the next step.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional, Union

from order_tax.rates import Number, to_decimal
from order_tax.settings import DEFAULT_GLOBAL_TAX_SETTINGS, GlobalTaxSettings


class RateSource(Enum):
    """Where an effective rate came from."""

    SYSTEM = "system"
    PRODUCT = "product"
    CATEGORY = "category"  # reserved, no strategy emits it yet
    CUSTOMER = "customer"
    OVERRIDE = "override"


def _optional_rate(value: Any) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


@dataclass(frozen=True)
class Product:
    """The tax-relevant part of a product record."""

    id: Union[int, str]
    tax_rate: Optional[Decimal] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data.get("id", ""),
            tax_rate=_optional_rate(data.get("tax_rate")),
            name=data.get("name", ""),
        )


@dataclass(frozen=True)
class Customer:
    """The tax-relevant part of a customer record."""

    id: Union[int, str]
    tax_exempt: bool = False
    tax_rate_override: Optional[Decimal] = None
    exemption_reason: Optional[str] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        return cls(
            id=data.get("id", ""),
            tax_exempt=data.get("tax_exempt") is True,
            tax_rate_override=_optional_rate(data.get("tax_rate_override")),
            exemption_reason=data.get("exemption_reason"),
            name=data.get("name", ""),
        )


@dataclass(frozen=True)
class TaxConfig:
    """The rate that applies to a line and why."""

    rate: Decimal
    source: RateSource
    inclusive_pricing: bool = False
    exemption_reason: Optional[str] = None

    @property
    def is_exempt(self) -> bool:
        # Any source can drive the rate to zero
        return self.rate == 0


@dataclass(frozen=True)
class RateContext:
    """Inputs to one rate resolution."""

    product: Optional[Product]
    customer: Optional[Customer]
    override_rate: Optional[Decimal]
    settings: GlobalTaxSettings


@dataclass(frozen=True)
class RateStrategy:
    """One step of the precedence chain."""

    source: RateSource
    applies: Callable[[RateContext], bool]
    rate: Callable[[RateContext], Decimal]
    exemption_reason: Callable[[RateContext], Optional[str]] = (
        lambda ctx: None
    )


def _customer_exempt(ctx: RateContext) -> bool:
    return (
        ctx.settings.allow_customer_exemption
        and ctx.customer is not None
        and ctx.customer.tax_exempt is True
    )


def _customer_override(ctx: RateContext) -> bool:
    return (
        ctx.settings.allow_customer_exemption
        and ctx.customer is not None
        and ctx.customer.tax_rate_override is not None
    )


def _product_rate(ctx: RateContext) -> bool:
    return (
        ctx.settings.allow_product_override
        and ctx.product is not None
        and ctx.product.tax_rate is not None
    )


RATE_STRATEGIES: tuple[RateStrategy, ...] = (
    RateStrategy(
        source=RateSource.OVERRIDE,
        applies=lambda ctx: ctx.override_rate is not None,
        rate=lambda ctx: ctx.override_rate,
    ),
    RateStrategy(
        source=RateSource.CUSTOMER,
        applies=_customer_exempt,
        rate=lambda ctx: Decimal("0"),
        exemption_reason=lambda ctx: ctx.customer.exemption_reason,
    ),
    RateStrategy(
        source=RateSource.CUSTOMER,
        applies=_customer_override,
        rate=lambda ctx: ctx.customer.tax_rate_override,
    ),
    RateStrategy(
        source=RateSource.PRODUCT,
        applies=_product_rate,
        rate=lambda ctx: ctx.product.tax_rate,
    ),
    RateStrategy(
        source=RateSource.SYSTEM,
        applies=lambda ctx: True,
        rate=lambda ctx: ctx.settings.default_rate,
    ),
)


def resolve(
    product: Optional[Product] = None,
    customer: Optional[Customer] = None,
    override_rate: Optional[Number] = None,
    settings: Optional[GlobalTaxSettings] = None,
    strategies: tuple[RateStrategy, ...] = RATE_STRATEGIES,
) -> TaxConfig:
    """
    Resolve the effective rate for a line together with its source.

    The first strategy that applies decides both the rate and the
    reported source, so the two can never disagree.
    """
    settings = settings or DEFAULT_GLOBAL_TAX_SETTINGS
    ctx = RateContext(
        product=product,
        customer=customer,
        override_rate=_optional_rate(override_rate),
        settings=settings,
    )
    for strategy in strategies:
        if strategy.applies(ctx):
            return TaxConfig(
                rate=to_decimal(strategy.rate(ctx)),
                source=strategy.source,
                inclusive_pricing=settings.inclusive_pricing_default,
                exemption_reason=strategy.exemption_reason(ctx),
            )
    # The system strategy always applies; reached only with a custom chain
    return TaxConfig(
        rate=settings.default_rate,
        source=RateSource.SYSTEM,
        inclusive_pricing=settings.inclusive_pricing_default,
    )


def resolve_rate(
    product: Optional[Product] = None,
    customer: Optional[Customer] = None,
    override_rate: Optional[Number] = None,
    settings: Optional[GlobalTaxSettings] = None,
) -> Decimal:
    """Return the effective tax rate (percent) for a line."""
    return resolve(product, customer, override_rate, settings).rate


def get_tax_config(
    product: Optional[Product] = None,
    customer: Optional[Customer] = None,
    override_rate: Optional[Number] = None,
    settings: Optional[GlobalTaxSettings] = None,
) -> TaxConfig:
    """Return the full tax configuration for a transaction."""
    return resolve(product, customer, override_rate, settings)


def is_customer_tax_exempt(customer: Optional[Customer] = None) -> bool:
    return customer is not None and customer.tax_exempt is True
