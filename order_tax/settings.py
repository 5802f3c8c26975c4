"""
Global tax settings.

One GlobalTaxSettings value configures a calculation session. It is
frozen: to change settings, build a new value (``dataclasses.replace``
or ``GlobalTaxSettings.from_dict``) and hand that to the next call.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from order_tax.exceptions import TaxSettingsError
from order_tax.rates import is_valid_tax_rate, to_decimal

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "ORDER_TAX_SETTINGS"

# Indonesian PPN
SYSTEM_DEFAULT_TAX_RATE = Decimal("11.0")


class CalculationMethod(Enum):
    EXCLUSIVE = "exclusive"  # tax added on top of price
    INCLUSIVE = "inclusive"  # tax already embedded in price


class RoundingMethod(Enum):
    ROUND = "round"  # half up
    FLOOR = "floor"
    CEIL = "ceil"


# Stored settings use the back office API's camelCase keys
_SETTING_KEYS: dict[str, str] = {
    "default_rate": "defaultRate",
    "allow_product_override": "allowProductOverride",
    "allow_customer_exemption": "allowCustomerExemption",
    "inclusive_pricing_default": "inclusivePricingDefault",
    "tax_calculation_method": "taxCalculationMethod",
    "rounding_method": "roundingMethod",
    "rounding_precision": "roundingPrecision",
}


@dataclass(frozen=True)
class GlobalTaxSettings:
    """Process-wide tax configuration, read-only during a calculation."""

    default_rate: Decimal = SYSTEM_DEFAULT_TAX_RATE
    allow_product_override: bool = True
    allow_customer_exemption: bool = True
    inclusive_pricing_default: bool = False
    tax_calculation_method: CalculationMethod = CalculationMethod.EXCLUSIVE
    rounding_method: RoundingMethod = RoundingMethod.ROUND
    rounding_precision: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlobalTaxSettings":
        """
        Build settings from a stored mapping.

        Accepts snake_case or camelCase keys. Missing keys keep their
        defaults; out-of-range values raise TaxSettingsError.
        """
        values: dict[str, Any] = {}
        for attr, camel in _SETTING_KEYS.items():
            if attr in data:
                values[attr] = data[attr]
            elif camel in data:
                values[attr] = data[camel]

        if "default_rate" in values:
            try:
                values["default_rate"] = to_decimal(values["default_rate"])
            except (InvalidOperation, ValueError) as e:
                raise TaxSettingsError(
                    f"Invalid default rate: {values['default_rate']!r}"
                ) from e
            if not is_valid_tax_rate(values["default_rate"]):
                raise TaxSettingsError(
                    f"Default rate must be between 0 and 100, "
                    f"got {values['default_rate']}"
                )

        for attr, enum_cls in (
            ("tax_calculation_method", CalculationMethod),
            ("rounding_method", RoundingMethod),
        ):
            if attr in values and not isinstance(values[attr], enum_cls):
                try:
                    values[attr] = enum_cls(values[attr])
                except ValueError as e:
                    raise TaxSettingsError(
                        f"Unknown {_SETTING_KEYS[attr]}: {values[attr]!r}"
                    ) from e

        if "rounding_precision" in values:
            precision = values["rounding_precision"]
            if (
                isinstance(precision, bool)
                or not isinstance(precision, int)
                or precision < 0
            ):
                raise TaxSettingsError(
                    f"Rounding precision must be a non-negative integer, "
                    f"got {precision!r}"
                )

        for attr in (
            "allow_product_override",
            "allow_customer_exemption",
            "inclusive_pricing_default",
        ):
            if attr in values:
                values[attr] = bool(values[attr])

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Return the settings in the stored camelCase form."""
        return {
            "defaultRate": float(self.default_rate),
            "allowProductOverride": self.allow_product_override,
            "allowCustomerExemption": self.allow_customer_exemption,
            "inclusivePricingDefault": self.inclusive_pricing_default,
            "taxCalculationMethod": self.tax_calculation_method.value,
            "roundingMethod": self.rounding_method.value,
            "roundingPrecision": self.rounding_precision,
        }


DEFAULT_GLOBAL_TAX_SETTINGS = GlobalTaxSettings()


def load_settings(
    path: Optional[Union[str, Path]] = None,
) -> GlobalTaxSettings:
    """
    Load settings from a JSON file.

    Falls back to the file named by ORDER_TAX_SETTINGS, then to the
    built-in defaults.
    """
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR) or None
    if path is None:
        logger.debug("No tax settings file configured; using defaults")
        return DEFAULT_GLOBAL_TAX_SETTINGS

    settings_path = Path(path)
    if not settings_path.exists():
        raise TaxSettingsError(f"Settings file not found: {settings_path}")

    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TaxSettingsError(
            f"Settings file {settings_path} is not valid JSON: {e}"
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise TaxSettingsError(
            f"Cannot read settings file {settings_path}: {e}"
        ) from e
    if not isinstance(data, dict):
        raise TaxSettingsError(
            f"Settings file {settings_path} must contain a JSON object"
        )

    settings = GlobalTaxSettings.from_dict(data)
    logger.info(
        "Loaded tax settings from %s (default rate %s%%, %s)",
        settings_path,
        settings.default_rate,
        settings.tax_calculation_method.value,
    )
    return settings
