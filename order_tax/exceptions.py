"""Errors raised by the layers around the calculation engine."""

from __future__ import annotations


class OrderTaxError(Exception):
    """Base class for order tax errors."""


class TaxSettingsError(OrderTaxError, ValueError):
    """Tax settings could not be loaded or are out of range."""


class InvalidTaxInput(OrderTaxError, ValueError):
    """A caller supplied a quantity, price or rate the engine must not see."""
