"""
Summary statistics over the visible daily aggregates.

All figures are computed on either cost or consumption, chosen by the unit mode.
"""
from __future__ import annotations

import pandas as pd

from parse_result import DailyAggregate, InsightStats, UnitMode

TREND_WINDOW_DAYS = 7
SAVINGS_FACTOR = 0.20


def compute_trend(values: pd.Series, window: int = TREND_WINDOW_DAYS) -> float:
    """
    Percentage change from the first window's average to the last window's.

    Windows are the literal first/last `window` values, so for fewer than
    2 * window values they overlap. A first-window average of zero gives 0.0.
    """
    if values.empty:
        return 0.0
    first_avg = values.head(window).mean()
    last_avg = values.tail(window).mean()
    if first_avg == 0:
        return 0.0
    return float((last_avg - first_avg) / first_avg * 100)


def compute_insights(aggregates: list[DailyAggregate], mode: UnitMode) -> InsightStats:
    """
    Calculate total, average, maximum, trend and savings for the selection.

    Raises ValueError if `aggregates` is empty; callers filter first and
    only ask for statistics when something is in view.
    """
    if not aggregates:
        raise ValueError("Cannot compute insights for an empty selection")

    values = pd.Series(
        [a.value(mode) for a in aggregates],
        index=[a.date for a in aggregates],
        dtype="float64",
    )

    total = float(values.sum())
    # idxmax returns the first occurrence on ties
    max_date = values.idxmax()

    return InsightStats(
        mode=mode,
        total=total,
        average=total / len(values),
        maximum=float(values.max()),
        maximum_date=str(max_date),
        trend_pct=compute_trend(values),
        potential_savings=total * SAVINGS_FACTOR,
        day_count=len(values),
    )
