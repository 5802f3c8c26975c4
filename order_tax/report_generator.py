"""
Order tax report generator.

Produces:
- Order tax summaries with a per-rate breakdown
- Per-line detail tables (as pandas DataFrames)
- CSV and JSON export
- Console-friendly text
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from order_tax.calculator import LineTotals, OrderTaxBreakdown

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """Turn a report tree into JSON/CSV-ready values (Decimal -> float)."""
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


class ReportGenerator:
    """
    Generates order tax reports with export capabilities.

    Reports are structured dicts that can be rendered to console text
    or exported to CSV/JSON files.
    """

    def __init__(self, output_dir: Optional[str] = None) -> None:
        self.output_dir = Path(output_dir) if output_dir else Path("reports")
        self.output_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Order and line reports
    # ------------------------------------------------------------------

    def line_report(self, line: LineTotals) -> dict[str, Any]:
        return {
            "subtotal": line.subtotal,
            "tax_rate": line.tax_rate,
            "tax_amount": line.tax_amount,
            "total": line.total,
            "method": line.method.value,
        }

    def order_report(
        self,
        order: OrderTaxBreakdown,
        period_label: str = "",
    ) -> dict[str, Any]:
        """
        Generate an order tax summary.

        Returns a structured dict suitable for display or export.
        """
        return {
            "report_type": "order_tax_breakdown",
            "period": period_label,
            "generated_date": date.today().isoformat(),
            "summary": {
                "line_count": len(order.lines),
                "subtotal": order.subtotal,
                "total_tax": order.total_tax,
                "total": order.total,
                "overall_effective_rate": (
                    float(order.total_tax / order.subtotal)
                    if order.subtotal > 0
                    else 0.0
                ),
            },
            "rate_breakdown": [
                {
                    "rate": b.rate,
                    "label": b.label,
                    "items": b.items,
                    "tax_amount": b.amount,
                }
                for b in order.breakdown
            ],
            "lines": [self.line_report(line) for line in order.lines],
        }

    def lines_frame(self, order: OrderTaxBreakdown) -> pd.DataFrame:
        """Per-line results as a DataFrame, one row per order line."""
        rows = [
            {"line": i + 1, **_plain(self.line_report(line))}
            for i, line in enumerate(order.lines)
        ]
        columns = ["line", "subtotal", "tax_rate", "tax_amount", "total", "method"]
        return pd.DataFrame(rows, columns=columns)

    # ------------------------------------------------------------------
    # Export methods
    # ------------------------------------------------------------------

    def to_json(
        self,
        report: dict[str, Any],
        filename: Optional[str] = None,
    ) -> str:
        """Export a report to JSON. Returns the JSON string."""
        json_str = json.dumps(_plain(report), indent=2)

        if filename:
            path = self.output_dir / filename
            path.write_text(json_str, encoding="utf-8")
            logger.info("Wrote JSON report to %s", path)

        return json_str

    def to_csv(
        self,
        report: dict[str, Any],
        filename: Optional[str] = None,
        section: str = "rate_breakdown",
    ) -> str:
        """
        Export a report section to CSV. Returns the CSV string.

        The section parameter specifies which list/dict in the report
        to export as rows.
        """
        data = report.get(section, [])
        if not data:
            return ""

        output = io.StringIO()

        if isinstance(data, list) and isinstance(data[0], dict):
            writer = csv.DictWriter(output, fieldnames=list(data[0].keys()))
            writer.writeheader()
            for row in data:
                writer.writerow(_plain(row))
        elif isinstance(data, dict):
            writer = csv.writer(output)
            writer.writerow(["key", "value"])
            for k, v in data.items():
                writer.writerow([k, _plain(v)])

        csv_str = output.getvalue()

        if filename:
            path = self.output_dir / filename
            path.write_text(csv_str, encoding="utf-8")
            logger.info("Wrote CSV section %r to %s", section, path)

        return csv_str

    def export_line_details(
        self,
        order: OrderTaxBreakdown,
        filename: str = "line_details.csv",
    ) -> str:
        """Export per-line calculation results to CSV."""
        csv_str = self.lines_frame(order).to_csv(index=False)
        path = self.output_dir / filename
        path.write_text(csv_str, encoding="utf-8")
        logger.info("Wrote %d line(s) to %s", len(order.lines), path)
        return csv_str

    # ------------------------------------------------------------------
    # Console-formatted text output
    # ------------------------------------------------------------------

    def format_text(self, report: dict[str, Any]) -> str:
        """Format a report as human-readable text for console output."""
        title = report.get("report_type", "report").replace("_", " ").title()
        heading = f"{title} ({report.get('generated_date', '')})"
        if report.get("period"):
            heading += f" - {report['period']}"
        lines: list[str] = [heading, "=" * len(heading), ""]

        summary = report.get("summary", {})
        if summary:
            lines.append("SUMMARY")
            lines.append("-" * 40)
            for key, value in summary.items():
                label = key.replace("_", " ").title()
                if isinstance(value, (float, Decimal)):
                    if "rate" in key:
                        lines.append(f"  {label}: {float(value):.2%}")
                    else:
                        lines.append(f"  {label}: {float(value):,.2f}")
                else:
                    lines.append(f"  {label}: {value}")
            lines.append("")

        rate_data = report.get("rate_breakdown", [])
        if rate_data:
            lines.append("TAX BY RATE")
            lines.append("-" * 40)
            for rd in rate_data:
                lines.append(
                    f"  {rd['label']:<24} {float(rd['tax_amount']):>14,.2f} tax"
                    f" | {rd['items']} line(s)"
                )
            lines.append("")

        return "\n".join(lines)
