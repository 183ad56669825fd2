"""Date range selection over daily aggregates.

An out-of-order selection is never rejected: moving the start past the end
pins it to the end, and moving the end before the start pins it to the start.
"""
from __future__ import annotations

from datetime import date, timedelta

from parse_result import DailyAggregate, DateRange

ALL_DATA = "All Data"

PRESET_DAYS = {
    "Last 7 Days": 7,
    "Last 30 Days": 30,
    "Last 90 Days": 90,
}

PRESET_PERIODS = [ALL_DATA, *PRESET_DAYS]


def dataset_bounds(aggregates: list[DailyAggregate]) -> DateRange | None:
    """True first/last dates of a sorted aggregate list, or None if empty."""
    if not aggregates:
        return None
    return DateRange(aggregates[0].day, aggregates[-1].day)


def reset_range(aggregates: list[DailyAggregate]) -> DateRange | None:
    """Restore the selection to the whole dataset."""
    return dataset_bounds(aggregates)


def move_start(current: DateRange, new_start: date) -> DateRange:
    if new_start > current.end:
        new_start = current.end
    return DateRange(new_start, current.end)


def move_end(current: DateRange, new_end: date) -> DateRange:
    if new_end < current.start:
        new_end = current.start
    return DateRange(current.start, new_end)


def preset_range(bounds: DateRange, period: str) -> DateRange:
    """
    Range for a named period, anchored at the last day of the data.

    The start never goes before the first day of the data.
    """
    if period == ALL_DATA:
        return bounds
    try:
        days = PRESET_DAYS[period]
    except KeyError:
        raise ValueError(f"Unknown period: {period}") from None
    start = max(bounds.end - timedelta(days=days - 1), bounds.start)
    return DateRange(start, bounds.end)


def filter_by_range(
    aggregates: list[DailyAggregate],
    date_range: DateRange | None,
) -> list[DailyAggregate]:
    """Aggregates whose date falls inside the inclusive range, in input order."""
    if date_range is None:
        return list(aggregates)
    return [a for a in aggregates if date_range.contains(a.day)]
