"""
Command-line interface for the Order Tax Engine.

Provides subcommands for line calculation, reverse calculation from a
tax-inclusive price, order breakdowns from CSV, and the rate catalog.
"""

from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from order_tax.calculator import LineTotals, OrderLine, TaxCalculator
from order_tax.exceptions import InvalidTaxInput, TaxSettingsError
from order_tax.logging_conf import setup_logging
from order_tax.rates import (
    COMMON_TAX_RATES,
    TAX_CALCULATION_METHODS,
    TAX_EXEMPTION_REASONS,
    format_tax_rate,
)
from order_tax.report_generator import ReportGenerator
from order_tax.resolver import Customer, Product, get_tax_config
from order_tax.settings import GlobalTaxSettings, load_settings
from order_tax.validation import (
    validate_amount,
    validate_order_line,
    validate_tax_rate,
)

console = Console()
logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _customer_from_args(args: argparse.Namespace) -> Optional[Customer]:
    if not args.exempt and args.customer_rate is None:
        return None
    override = None
    if args.customer_rate is not None:
        override = validate_tax_rate(args.customer_rate)
    return Customer(
        id="cli",
        tax_exempt=args.exempt,
        tax_rate_override=override,
        exemption_reason=args.exemption_reason,
    )


def _load_order_csv(path: str) -> list[OrderLine]:
    """
    Load order lines from a CSV file.

    Expected columns: quantity, unit_price, product_rate,
                      tax_rate_override (the last two may be blank)
    """
    lines: list[OrderLine] = []
    csv_path = Path(path)
    if not csv_path.exists():
        _fail(f"File not found: {path}")

    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader):
            try:
                override_raw = (row.get("tax_rate_override") or "").strip()
                qty, price, override = validate_order_line(
                    row["quantity"].strip(),
                    row["unit_price"].strip(),
                    override_raw or None,
                )
                product_raw = (row.get("product_rate") or "").strip()
                product = None
                if product_raw:
                    product = Product(
                        id=row.get("product_id", str(i + 1)),
                        tax_rate=validate_tax_rate(product_raw),
                    )
                lines.append(
                    OrderLine(
                        quantity=qty,
                        unit_price=price,
                        product=product,
                        tax_rate_override=override,
                    )
                )
            except (KeyError, AttributeError, InvalidTaxInput) as e:
                console.print(f"[yellow]Skipping row {i + 1}: {e}[/yellow]")
    logger.debug("Loaded %d order line(s) from %s", len(lines), csv_path)
    return lines


def _totals_panel(totals: LineTotals, title: str, source: str = "") -> Panel:
    rate_line = format_tax_rate(totals.tax_rate, verbose=True)
    if source:
        rate_line += f" [dim]({source})[/dim]"
    return Panel(
        f"[bold]Subtotal:[/bold] {totals.subtotal:,}\n"
        f"[bold]Tax Rate:[/bold] {rate_line}\n"
        f"[bold]Tax Amount:[/bold] {totals.tax_amount:,}\n"
        f"[bold]Total:[/bold] {totals.total:,}\n"
        f"[bold]Method:[/bold] {totals.method.value}",
        title=title,
        border_style="blue",
    )


# -----------------------------------------------------------------------
# Subcommand: calculate
# -----------------------------------------------------------------------


def cmd_calculate(args: argparse.Namespace) -> None:
    """Calculate totals for a single order line."""
    settings: GlobalTaxSettings = args.tax_settings
    calc = TaxCalculator(settings)

    try:
        qty, price, override = validate_order_line(
            args.quantity, args.unit_price, args.rate
        )
        product = None
        if args.product_rate is not None:
            product = Product(id="cli", tax_rate=validate_tax_rate(args.product_rate))
        customer = _customer_from_args(args)
    except InvalidTaxInput as e:
        _fail(str(e))

    config = get_tax_config(product, customer, override, settings)
    totals = calc.line(
        qty,
        price,
        product=product,
        customer=customer,
        tax_rate_override=override,
        method=args.method,
    )
    console.print(_totals_panel(totals, "Line Tax Calculation", config.source.value))
    if config.is_exempt and config.exemption_reason:
        console.print(f"[yellow]Exempt: {config.exemption_reason}[/yellow]")


# -----------------------------------------------------------------------
# Subcommand: reverse
# -----------------------------------------------------------------------


def cmd_reverse(args: argparse.Namespace) -> None:
    """Split a tax-inclusive price into subtotal and tax."""
    calc = TaxCalculator(args.tax_settings)
    try:
        total = validate_amount("Total", args.total)
        rate = validate_tax_rate(args.rate)
    except InvalidTaxInput as e:
        _fail(str(e))

    result = calc.reverse(total, rate)
    console.print(
        Panel(
            f"[bold]Total (incl. tax):[/bold] {total:,}\n"
            f"[bold]Tax Rate:[/bold] {format_tax_rate(result.tax_rate)}\n"
            f"[bold]Subtotal:[/bold] {result.subtotal:,}\n"
            f"[bold]Tax Amount:[/bold] {result.tax_amount:,}",
            title="Reverse Tax Calculation",
            border_style="cyan",
        )
    )


# -----------------------------------------------------------------------
# Subcommand: order
# -----------------------------------------------------------------------


def cmd_order(args: argparse.Namespace) -> None:
    """Calculate an order breakdown from a CSV of lines."""
    calc = TaxCalculator(args.tax_settings)
    lines = _load_order_csv(args.file)
    try:
        customer = _customer_from_args(args)
    except InvalidTaxInput as e:
        _fail(str(e))
    order = calc.order(lines, customer)

    table = Table(title="Order Lines", box=box.ROUNDED, show_lines=True)
    table.add_column("#", style="dim")
    table.add_column("Subtotal", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Tax", justify="right", style="bold")
    table.add_column("Total", justify="right")
    for i, line in enumerate(order.lines):
        table.add_row(
            str(i + 1),
            f"{line.subtotal:,}",
            format_tax_rate(line.tax_rate),
            f"{line.tax_amount:,}",
            f"{line.total:,}",
        )
    console.print(table)

    rates = Table(title="Tax by Rate", box=box.SIMPLE)
    rates.add_column("Rate")
    rates.add_column("Lines", justify="right")
    rates.add_column("Tax", justify="right", style="bold")
    for b in order.breakdown:
        rates.add_row(b.label, str(b.items), f"{b.amount:,}")
    console.print(rates)

    console.print(
        Panel(
            f"[bold]Subtotal:[/bold] {order.subtotal:,}\n"
            f"[bold]Total Tax:[/bold] {order.total_tax:,}\n"
            f"[bold]Total:[/bold] {order.total:,}",
            title="Order Summary",
            border_style="green",
        )
    )

    if args.export_json or args.export_csv:
        rg = ReportGenerator(args.output_dir or "reports")
        report = rg.order_report(order, period_label=args.period or "")
        if args.export_json:
            rg.to_json(report, args.export_json)
            console.print(f"[green]JSON exported to {args.export_json}[/green]")
        if args.export_csv:
            rg.to_csv(report, f"rates_{args.export_csv}")
            rg.export_line_details(order, f"lines_{args.export_csv}")
            console.print("[green]CSV exported.[/green]")


# -----------------------------------------------------------------------
# Subcommand: rates
# -----------------------------------------------------------------------


def cmd_rates(args: argparse.Namespace) -> None:
    """Display the rate catalog, exemption reasons and calculation methods."""
    settings: GlobalTaxSettings = args.tax_settings

    table = Table(title="Common Tax Rates", box=box.ROUNDED)
    table.add_column("Rate", justify="right", style="bold")
    table.add_column("Label")
    table.add_column("Description")
    for rate in COMMON_TAX_RATES:
        style = "green" if rate.value == settings.default_rate else ""
        table.add_row(
            format_tax_rate(rate.value, show_zero_as_exempt=False),
            rate.label,
            rate.description,
            style=style,
        )
    console.print(table)

    reasons = Table(title="Exemption Reasons", box=box.SIMPLE)
    reasons.add_column("Code", style="dim")
    reasons.add_column("Label")
    for reason, label in TAX_EXEMPTION_REASONS.items():
        reasons.add_row(reason.value, label)
    console.print(reasons)

    methods = Table(title="Calculation Methods", box=box.SIMPLE)
    methods.add_column("Method", style="dim")
    methods.add_column("Label")
    methods.add_column("Description")
    for option in TAX_CALCULATION_METHODS:
        current = option.value == settings.tax_calculation_method.value
        methods.add_row(
            option.value,
            option.label,
            option.description,
            style="green" if current else "",
        )
    console.print(methods)

    console.print(
        f"Default rate: [bold]{format_tax_rate(settings.default_rate, verbose=True)}"
        f"[/bold] ({settings.tax_calculation_method.value}, "
        f"{settings.rounding_method.value} to {settings.rounding_precision} places)"
    )


# -----------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------


def _add_customer_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--exempt", action="store_true", help="Customer is tax exempt")
    p.add_argument("--exemption-reason", help="Exemption reason code")
    p.add_argument("--customer-rate", help="Customer-specific tax rate (%%)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-tax",
        description="Order Tax Engine - Tax rate resolution and order tax calculation",
    )
    parser.add_argument(
        "--settings", help="JSON tax settings file (default: $ORDER_TAX_SETTINGS)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # calculate
    calc_p = subparsers.add_parser("calculate", help="Calculate tax for one line")
    calc_p.add_argument("--quantity", "-q", required=True, help="Quantity")
    calc_p.add_argument("--unit-price", "-p", required=True, help="Unit price")
    calc_p.add_argument("--rate", help="Explicit tax rate override (%%)")
    calc_p.add_argument("--product-rate", help="Product-specific tax rate (%%)")
    calc_p.add_argument(
        "--method", choices=["exclusive", "inclusive"], help="Pricing method"
    )
    _add_customer_args(calc_p)
    calc_p.set_defaults(func=cmd_calculate)

    # reverse
    rev_p = subparsers.add_parser(
        "reverse", help="Split a tax-inclusive total into subtotal and tax"
    )
    rev_p.add_argument("--total", required=True, help="Tax-inclusive amount")
    rev_p.add_argument("--rate", required=True, help="Tax rate (%%)")
    rev_p.set_defaults(func=cmd_reverse)

    # order
    order_p = subparsers.add_parser("order", help="Order breakdown from CSV lines")
    order_p.add_argument("--file", "-f", required=True, help="CSV file with order lines")
    _add_customer_args(order_p)
    order_p.add_argument("--period", help="Period label for reports")
    order_p.add_argument("--export-json", help="Export report to JSON file")
    order_p.add_argument("--export-csv", help="Export rate and line CSVs")
    order_p.add_argument("--output-dir", help="Output directory for exports")
    order_p.set_defaults(func=cmd_order)

    # rates
    rates_p = subparsers.add_parser("rates", help="View the common rate catalog")
    rates_p.set_defaults(func=cmd_rates)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(args.verbose)
    try:
        args.tax_settings = load_settings(args.settings)
    except TaxSettingsError as e:
        _fail(str(e))

    args.func(args)
