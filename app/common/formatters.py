"""Formatting utilities for the Energy Usage dashboard.

Currency, kWh, percentage, and date formatting helpers used by the page
and the stat cards.
"""
from __future__ import annotations

from datetime import date

from parse_result import DateRange, UnitMode


def format_currency(value: float | None, symbol: str = "$") -> str:
    """Format a value as USD currency, or return a dash if None."""
    if value is None:
        return "—"
    return f"{symbol}{value:,.2f}"


def format_kwh(value: float | None, precision: int = 1) -> str:
    """Format a kWh value with appropriate precision."""
    if value is None:
        return "—"
    return f"{value:,.{precision}f} kWh"


def format_value(value: float | None, mode: UnitMode) -> str:
    """Currency in cost mode, kWh otherwise."""
    return format_currency(value) if mode.is_cost else format_kwh(value)


def format_percentage(value: float | None, signed: bool = False) -> str:
    """Format a percentage value."""
    if value is None:
        return "—"
    return f"{value:+.1f}%" if signed else f"{value:.1f}%"


def format_day(value: date | str | None) -> str:
    """'05 Jan 2024' from a date or a YYYY-MM-DD string."""
    if not value:
        return "—"
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return value.strftime("%d %b %Y")


def format_date_range(date_range: DateRange | None) -> str:
    if date_range is None:
        return "—"
    return f"{format_day(date_range.start)} → {format_day(date_range.end)}"
