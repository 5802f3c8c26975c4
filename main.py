#!/usr/bin/env python3
"""
Order Tax Engine - Entry Point

Resolves the effective tax rate for order lines and calculates tax,
totals and per-rate breakdowns for back-office orders.

Usage:
    python main.py calculate --quantity 5 --unit-price 20000
    python main.py calculate -q 2 -p 50000 --product-rate 5 --exempt
    python main.py reverse --total 111000 --rate 11
    python main.py order --file data/sample_order.csv --export-json order.json
    python main.py --settings tax_settings.json rates
"""

from order_tax.cli import main

if __name__ == "__main__":
    main()
