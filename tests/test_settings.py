"""Tests for global tax settings and settings file loading."""

import json
from dataclasses import FrozenInstanceError, replace
from decimal import Decimal

import pytest

from order_tax.exceptions import TaxSettingsError
from order_tax.settings import (
    DEFAULT_GLOBAL_TAX_SETTINGS,
    SETTINGS_ENV_VAR,
    CalculationMethod,
    GlobalTaxSettings,
    RoundingMethod,
    load_settings,
)


# ── Defaults ─────────────────────────────────────────────────────────


def test_defaults():
    s = DEFAULT_GLOBAL_TAX_SETTINGS
    assert s.default_rate == Decimal("11")
    assert s.allow_product_override is True
    assert s.allow_customer_exemption is True
    assert s.inclusive_pricing_default is False
    assert s.tax_calculation_method is CalculationMethod.EXCLUSIVE
    assert s.rounding_method is RoundingMethod.ROUND
    assert s.rounding_precision == 2


def test_settings_are_frozen():
    with pytest.raises(FrozenInstanceError):
        DEFAULT_GLOBAL_TAX_SETTINGS.default_rate = Decimal("10")


def test_replace_builds_new_value():
    updated = replace(DEFAULT_GLOBAL_TAX_SETTINGS, default_rate=Decimal("12"))
    assert updated.default_rate == 12
    assert DEFAULT_GLOBAL_TAX_SETTINGS.default_rate == 11


# ── from_dict / to_dict ──────────────────────────────────────────────


def test_from_dict_camel_case():
    s = GlobalTaxSettings.from_dict(
        {
            "defaultRate": 10,
            "allowProductOverride": False,
            "taxCalculationMethod": "inclusive",
            "roundingMethod": "ceil",
            "roundingPrecision": 0,
        }
    )
    assert s.default_rate == Decimal("10")
    assert s.allow_product_override is False
    assert s.allow_customer_exemption is True
    assert s.tax_calculation_method is CalculationMethod.INCLUSIVE
    assert s.rounding_method is RoundingMethod.CEIL
    assert s.rounding_precision == 0


def test_from_dict_snake_case():
    s = GlobalTaxSettings.from_dict({"default_rate": "7.5", "rounding_method": "floor"})
    assert s.default_rate == Decimal("7.5")
    assert s.rounding_method is RoundingMethod.FLOOR


def test_from_dict_empty_keeps_defaults():
    assert GlobalTaxSettings.from_dict({}) == DEFAULT_GLOBAL_TAX_SETTINGS


def test_round_trip_through_dict():
    s = GlobalTaxSettings.from_dict({"defaultRate": 5, "roundingMethod": "floor"})
    assert GlobalTaxSettings.from_dict(s.to_dict()) == s


@pytest.mark.parametrize(
    "data",
    [
        {"defaultRate": 150},
        {"defaultRate": -1},
        {"defaultRate": "abc"},
        {"taxCalculationMethod": "sideways"},
        {"roundingMethod": "bankers"},
        {"roundingPrecision": -1},
        {"roundingPrecision": "2"},
        {"roundingPrecision": 1.5},
    ],
)
def test_from_dict_rejects_bad_values(data):
    with pytest.raises(TaxSettingsError):
        GlobalTaxSettings.from_dict(data)


def test_settings_error_is_value_error():
    with pytest.raises(ValueError):
        GlobalTaxSettings.from_dict({"defaultRate": 101})


# ── load_settings ────────────────────────────────────────────────────


def test_load_settings_from_file(tmp_path):
    path = tmp_path / "tax.json"
    path.write_text(json.dumps({"defaultRate": 10, "roundingPrecision": 0}))
    s = load_settings(path)
    assert s.default_rate == 10
    assert s.rounding_precision == 0


def test_load_settings_from_env(tmp_path, monkeypatch):
    path = tmp_path / "tax.json"
    path.write_text(json.dumps({"defaultRate": 5}))
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
    assert load_settings().default_rate == 5


def test_load_settings_defaults_without_file(monkeypatch):
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    assert load_settings() is DEFAULT_GLOBAL_TAX_SETTINGS


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(TaxSettingsError, match="not found"):
        load_settings(tmp_path / "missing.json")


def test_load_settings_invalid_json(tmp_path):
    path = tmp_path / "tax.json"
    path.write_text("{not json")
    with pytest.raises(TaxSettingsError, match="not valid JSON"):
        load_settings(path)


def test_load_settings_requires_object(tmp_path):
    path = tmp_path / "tax.json"
    path.write_text("[1, 2]")
    with pytest.raises(TaxSettingsError, match="JSON object"):
        load_settings(path)


def test_load_settings_unreadable_path(tmp_path):
    with pytest.raises(TaxSettingsError, match="Cannot read"):
        load_settings(tmp_path)


def test_load_settings_invalid_utf8(tmp_path):
    path = tmp_path / "tax.json"
    path.write_bytes(b"\xff\xfe{")
    with pytest.raises(TaxSettingsError, match="Cannot read"):
        load_settings(path)
