"""
Order Tax Engine
================

Tax rate resolution and tax calculation for commerce back-office
orders: which rate applies to a line, and how tax and totals follow
from it.

Modules:
    settings        - Global tax settings and settings file loading
    rates           - Common rate catalog, exemption reasons, formatting
    resolver        - Effective rate resolution (override > customer > product > default)
    calculator      - Tax, line totals, order breakdown, reverse calculation
    validation      - Input checks for callers of the engine
    report_generator- Order tax reports with CSV/JSON export
    cli             - Command-line interface
"""

__version__ = "1.0.0"

from order_tax.settings import (
    DEFAULT_GLOBAL_TAX_SETTINGS,
    CalculationMethod,
    GlobalTaxSettings,
    RoundingMethod,
    load_settings,
)
from order_tax.rates import format_tax_rate, is_valid_tax_rate
from order_tax.resolver import (
    Customer,
    Product,
    TaxConfig,
    get_tax_config,
    resolve_rate,
)
from order_tax.calculator import (
    TaxCalculator,
    calculate_line_item_totals,
    calculate_order_tax_breakdown,
    calculate_reverse_tax,
    calculate_tax,
    calculate_totals,
)
from order_tax.report_generator import ReportGenerator

__all__ = [
    "DEFAULT_GLOBAL_TAX_SETTINGS",
    "CalculationMethod",
    "GlobalTaxSettings",
    "RoundingMethod",
    "load_settings",
    "format_tax_rate",
    "is_valid_tax_rate",
    "Customer",
    "Product",
    "TaxConfig",
    "get_tax_config",
    "resolve_rate",
    "TaxCalculator",
    "calculate_line_item_totals",
    "calculate_order_tax_breakdown",
    "calculate_reverse_tax",
    "calculate_tax",
    "calculate_totals",
    "ReportGenerator",
]
