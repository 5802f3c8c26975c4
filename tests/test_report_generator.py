"""Tests for order tax reports and exports."""

import json
from decimal import Decimal

import pandas as pd
import pytest

from order_tax.calculator import OrderTaxBreakdown, calculate_order_tax_breakdown
from order_tax.report_generator import ReportGenerator


@pytest.fixture
def rg(tmp_path) -> ReportGenerator:
    return ReportGenerator(str(tmp_path))


@pytest.fixture
def order() -> OrderTaxBreakdown:
    return calculate_order_tax_breakdown(
        [
            {"quantity": 5, "unit_price": 20000},
            {"quantity": 1, "unit_price": 50000, "tax_rate_override": 0},
            {"quantity": 2, "unit_price": 1000, "tax_rate_override": 5},
        ]
    )


# ── Order report ─────────────────────────────────────────────────────


def test_order_report_summary(rg: ReportGenerator, order: OrderTaxBreakdown):
    report = rg.order_report(order, period_label="2024-06")
    assert report["report_type"] == "order_tax_breakdown"
    assert report["period"] == "2024-06"
    summary = report["summary"]
    assert summary["line_count"] == 3
    assert summary["subtotal"] == Decimal("152000")
    assert summary["total_tax"] == Decimal("11100")
    assert summary["total"] == Decimal("163100")
    assert summary["overall_effective_rate"] == pytest.approx(11100 / 152000)


def test_order_report_rate_breakdown(rg: ReportGenerator, order: OrderTaxBreakdown):
    report = rg.order_report(order)
    labels = [r["label"] for r in report["rate_breakdown"]]
    assert labels == ["11% (Indonesian PPN)", "Tax Exempt", "5% (Reduced Rate)"]
    assert len(report["lines"]) == 3
    assert report["lines"][0]["method"] == "exclusive"


def test_empty_order_report(rg: ReportGenerator):
    report = rg.order_report(calculate_order_tax_breakdown([]))
    assert report["summary"]["overall_effective_rate"] == 0.0
    assert report["rate_breakdown"] == []


# ── Exports ──────────────────────────────────────────────────────────


def test_to_json_writes_file(rg: ReportGenerator, order: OrderTaxBreakdown):
    json_str = rg.to_json(rg.order_report(order), "order.json")
    data = json.loads(json_str)
    assert data["summary"]["total"] == 163100.0
    assert (rg.output_dir / "order.json").exists()


def test_to_csv_rate_breakdown(rg: ReportGenerator, order: OrderTaxBreakdown):
    csv_str = rg.to_csv(rg.order_report(order), "rates.csv")
    rows = csv_str.strip().splitlines()
    assert rows[0] == "rate,label,items,tax_amount"
    assert len(rows) == 4
    assert (rg.output_dir / "rates.csv").exists()


def test_to_csv_summary_section(rg: ReportGenerator, order: OrderTaxBreakdown):
    csv_str = rg.to_csv(rg.order_report(order), section="summary")
    assert csv_str.splitlines()[0] == "key,value"


def test_to_csv_missing_section(rg: ReportGenerator, order: OrderTaxBreakdown):
    assert rg.to_csv(rg.order_report(order), section="nope") == ""


def test_lines_frame(rg: ReportGenerator, order: OrderTaxBreakdown):
    df = rg.lines_frame(order)
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == [
        "line", "subtotal", "tax_rate", "tax_amount", "total", "method"
    ]
    assert len(df) == 3
    assert df["tax_amount"].sum() == pytest.approx(11100.0)


def test_export_line_details(rg: ReportGenerator, order: OrderTaxBreakdown):
    rg.export_line_details(order, "lines.csv")
    df = pd.read_csv(rg.output_dir / "lines.csv")
    assert df["line"].tolist() == [1, 2, 3]


def test_format_text(rg: ReportGenerator, order: OrderTaxBreakdown):
    text = rg.format_text(rg.order_report(order))
    assert "Order Tax Breakdown" in text
    assert "TAX BY RATE" in text
    assert "Tax Exempt" in text


def test_format_text_heading_includes_period(rg: ReportGenerator, order: OrderTaxBreakdown):
    text = rg.format_text(rg.order_report(order, period_label="2024-06"))
    heading, underline = text.splitlines()[:2]
    assert heading.startswith("Order Tax Breakdown (")
    assert heading.endswith(" - 2024-06")
    assert underline == "=" * len(heading)


def test_to_json_converts_decimals_and_enums(rg: ReportGenerator, order: OrderTaxBreakdown):
    data = json.loads(rg.to_json(rg.order_report(order)))
    assert data["summary"]["total_tax"] == 11100.0
    assert data["lines"][0]["method"] == "exclusive"
