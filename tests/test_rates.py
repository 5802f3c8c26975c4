"""Tests for the rate catalog and formatting helpers."""

from decimal import Decimal

import pytest

from order_tax.rates import (
    COMMON_TAX_RATES,
    TAX_CALCULATION_METHODS,
    TAX_EXEMPTION_REASONS,
    ExemptionReason,
    find_common_rate,
    format_tax_rate,
    get_tax_exemption_label,
    is_valid_tax_rate,
    to_decimal,
    validate_tax_exemption,
)
from order_tax.settings import CalculationMethod


# ── Formatting ───────────────────────────────────────────────────────


def test_zero_rate_reads_tax_exempt():
    assert format_tax_rate(0) == "Tax Exempt"


def test_zero_rate_plain_when_requested():
    assert format_tax_rate(0, show_zero_as_exempt=False) == "0%"


def test_plain_rate():
    assert format_tax_rate(11) == "11%"
    assert format_tax_rate(Decimal("11.0")) == "11%"
    assert format_tax_rate(10) == "10%"
    assert format_tax_rate("12.50") == "12.5%"


@pytest.mark.parametrize(
    "rate, expected",
    [
        (5, "5% (Reduced Rate)"),
        (10, "10% (Standard Rate)"),
        (11, "11% (Indonesian PPN)"),
        (15, "15% (Luxury Goods)"),
        (20, "20%"),
        (7.5, "7.5%"),
    ],
)
def test_verbose_annotations(rate, expected):
    assert format_tax_rate(rate, verbose=True) == expected


def test_verbose_zero_still_exempt():
    assert format_tax_rate(0, verbose=True) == "Tax Exempt"


# ── Validation ───────────────────────────────────────────────────────


@pytest.mark.parametrize("rate", [0, 11, "99.99", 100, Decimal("0.5")])
def test_valid_rates(rate):
    assert is_valid_tax_rate(rate) is True


@pytest.mark.parametrize("rate", [-0.01, 100.5, 250, float("inf"), float("nan")])
def test_invalid_rates(rate):
    assert is_valid_tax_rate(rate) is False


@pytest.mark.parametrize("rate", ["abc", "", "11%"])
def test_unparseable_rates_are_invalid(rate):
    assert is_valid_tax_rate(rate) is False


def test_to_decimal_avoids_float_artifacts():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(11) == Decimal("11")
    d = Decimal("3.14")
    assert to_decimal(d) is d


# ── Catalog ──────────────────────────────────────────────────────────


def test_common_rates_catalog():
    values = [r.value for r in COMMON_TAX_RATES]
    assert values == [0, 5, 10, 11, 15, 20]


def test_find_common_rate():
    assert find_common_rate(11.0).label == "11% - Indonesian PPN"
    assert find_common_rate(12) is None


# ── Exemption reasons ────────────────────────────────────────────────


def test_all_reasons_have_labels():
    assert set(TAX_EXEMPTION_REASONS) == set(ExemptionReason)


def test_validate_tax_exemption():
    assert validate_tax_exemption("nonprofit") is True
    assert validate_tax_exemption("export") is True
    assert validate_tax_exemption("tourist") is False


def test_exemption_labels():
    assert get_tax_exemption_label("government") == "Government Entity"
    assert get_tax_exemption_label("resale") == "Resale Certificate"
    assert get_tax_exemption_label("tourist") == "tourist"
    assert get_tax_exemption_label(None) == "Not specified"
    assert get_tax_exemption_label("") == "Not specified"


# ── Calculation methods ──────────────────────────────────────────────


def test_calculation_methods_match_settings_enum():
    values = {m.value for m in TAX_CALCULATION_METHODS}
    assert values == {m.value for m in CalculationMethod}


def test_calculation_method_labels():
    labels = {m.value: m.label for m in TAX_CALCULATION_METHODS}
    assert labels == {"exclusive": "Tax Exclusive", "inclusive": "Tax Inclusive"}
