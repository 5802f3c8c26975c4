#!/usr/bin/env python3
"""
Quick Start Example
===================

Demonstrates line and order tax calculation with the default settings
(11% PPN, tax exclusive, rounded to 2 places).

Usage:
    python examples/quick_start.py
"""

from decimal import Decimal

from order_tax import (
    Customer,
    DEFAULT_GLOBAL_TAX_SETTINGS,
    Product,
    TaxCalculator,
    format_tax_rate,
    get_tax_config,
)
from order_tax.calculator import OrderLine


def main() -> None:
    calculator = TaxCalculator(DEFAULT_GLOBAL_TAX_SETTINGS)

    # 5 units at 20,000 with no product or customer rate
    line = calculator.line(5, Decimal("20000"))
    print(f"Subtotal:   {line.subtotal:,}")
    print(f"Tax Rate:   {format_tax_rate(line.tax_rate, verbose=True)}")
    print(f"Tax Amount: {line.tax_amount:,}")
    print(f"Total:      {line.total:,}")

    # The same line for an exempt customer
    print("\n--- Exempt Customer ---")
    customer = Customer(id=42, tax_exempt=True, exemption_reason="export")
    config = get_tax_config(customer=customer)
    exempt_line = calculator.line(5, Decimal("20000"), customer=customer)
    print(f"Rate Source: {config.source.value}")
    print(f"Exempt:      {config.is_exempt} ({config.exemption_reason})")
    print(f"Total:       {exempt_line.total:,}")

    # An order mixing rates
    print("\n--- Order Breakdown ---")
    order = calculator.order(
        [
            OrderLine(quantity=Decimal("5"), unit_price=Decimal("20000")),
            OrderLine(
                quantity=Decimal("3"),
                unit_price=Decimal("15000"),
                product=Product(id=7, tax_rate=Decimal("5")),
            ),
            OrderLine(
                quantity=Decimal("2"),
                unit_price=Decimal("25000"),
                tax_rate_override=Decimal("0"),
            ),
        ]
    )
    for entry in order.breakdown:
        print(f"{entry.label:<24} {entry.amount:>12,} ({entry.items} line(s))")
    print(f"Order total: {order.total:,}")


if __name__ == "__main__":
    main()
