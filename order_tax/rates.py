"""
Tax rate catalog, exemption reasons, and rate formatting helpers.

Rates are percentages (11 means 11%), held as Decimal so that a rate
read from configuration, a product record, or a CSV file compares equal
regardless of how it was written (``11``, ``11.0`` and ``"11"`` are the
same rate).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert an API number to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class ExemptionReason(Enum):
    """Reasons a customer may be registered as tax exempt."""

    GOVERNMENT = "government"
    NONPROFIT = "nonprofit"
    EXPORT = "export"
    RESALE = "resale"
    MEDICAL = "medical"
    EDUCATION = "education"
    OTHER = "other"


TAX_EXEMPTION_REASONS: dict[ExemptionReason, str] = {
    ExemptionReason.GOVERNMENT: "Government Entity",
    ExemptionReason.NONPROFIT: "Non-Profit Organization",
    ExemptionReason.EXPORT: "Export Sales",
    ExemptionReason.RESALE: "Resale Certificate",
    ExemptionReason.MEDICAL: "Medical Exemption",
    ExemptionReason.EDUCATION: "Educational Institution",
    ExemptionReason.OTHER: "Other (Specify)",
}


@dataclass(frozen=True)
class CommonRate:
    """A rate offered for quick selection in order entry screens."""

    value: Decimal
    label: str
    description: str


# ---------------------------------------------------------------------------
# Rates offered in the back office rate picker
# ---------------------------------------------------------------------------

COMMON_TAX_RATES: tuple[CommonRate, ...] = (
    CommonRate(Decimal("0"), "0% - Tax Exempt", "No tax applied"),
    CommonRate(Decimal("5"), "5% - Reduced Rate", "Essential goods"),
    CommonRate(Decimal("10"), "10% - Standard Rate", "Most goods & services"),
    CommonRate(Decimal("11"), "11% - Indonesian PPN", "Indonesian VAT"),
    CommonRate(Decimal("15"), "15% - Luxury Goods", "Premium items"),
    CommonRate(Decimal("20"), "20% - Premium Rate", "High-value items"),
)


@dataclass(frozen=True)
class MethodOption:
    """A calculation method as offered in the settings screen."""

    value: str
    label: str
    description: str


# Values match settings.CalculationMethod
TAX_CALCULATION_METHODS: tuple[MethodOption, ...] = (
    MethodOption("exclusive", "Tax Exclusive", "Tax added to base price"),
    MethodOption("inclusive", "Tax Inclusive", "Tax included in price"),
)

# Annotations shown by format_tax_rate(verbose=True)
_RATE_NOTES: dict[Decimal, str] = {
    Decimal("5"): "Reduced Rate",
    Decimal("10"): "Standard Rate",
    Decimal("11"): "Indonesian PPN",
    Decimal("15"): "Luxury Goods",
}


def _rate_text(rate: Decimal) -> str:
    # normalize() alone gives 1E+1 for 10
    return f"{rate.normalize():f}"


def format_tax_rate(
    rate: Number,
    verbose: bool = False,
    show_zero_as_exempt: bool = True,
) -> str:
    """
    Render a rate for display.

    A zero rate reads "Tax Exempt" unless show_zero_as_exempt is off.
    Verbose mode annotates the well-known rates (5, 10, 11, 15); any
    other rate is shown as a bare percentage.
    """
    value = to_decimal(rate)
    if value == 0:
        return "Tax Exempt" if show_zero_as_exempt else "0%"

    rate_str = f"{_rate_text(value)}%"
    if not verbose:
        return rate_str

    note = _RATE_NOTES.get(value)
    if note:
        return f"{rate_str} ({note})"
    return rate_str


def is_valid_tax_rate(rate: Number) -> bool:
    """Return True when the rate lies within 0..100 percent."""
    try:
        value = to_decimal(rate)
    except (InvalidOperation, ValueError):
        return False
    if not value.is_finite():
        return False
    return Decimal("0") <= value <= Decimal("100")


def find_common_rate(rate: Number) -> Optional[CommonRate]:
    """Look up a catalog entry for a rate, if it has one."""
    value = to_decimal(rate)
    for common in COMMON_TAX_RATES:
        if common.value == value:
            return common
    return None


def validate_tax_exemption(reason: str) -> bool:
    """Check that an exemption reason is one of the recognized codes."""
    return any(r.value == reason for r in TAX_EXEMPTION_REASONS)


def get_tax_exemption_label(reason: Optional[str] = None) -> str:
    """Return the display label for an exemption reason code."""
    if not reason:
        return "Not specified"
    for r, label in TAX_EXEMPTION_REASONS.items():
        if r.value == reason:
            return label
    return reason
