"""
Daily aggregation of interval readings.

Readings are grouped by the calendar date in their timestamp, converted from
Wh to kWh, summed at full precision and rounded once when the DailyAggregate
records are emitted.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from parse_result import DailyAggregate, Reading, WeeklyAggregate

log = logging.getLogger(__name__)

RATE_PER_KWH = 0.14  # USD per kWh
WH_PER_KWH = 1000

DAILY_COLUMNS = ["date", "consumption_kwh", "generation_kwh", "cost_usd"]


def round2(value: float) -> float:
    """Round to cents with halves going up, on the exact binary value of the float."""
    return float(Decimal(float(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def aggregate_daily(readings: list[Reading]) -> list[DailyAggregate]:
    """
    Fold readings into one DailyAggregate per calendar date.

    Returns aggregates sorted ascending by date. An empty list gives an
    empty list. Calling this twice on the same readings gives identical output.
    """
    if not readings:
        return []

    df = pd.DataFrame({
        "date": [r.date_key for r in readings],
        "consumption_kwh": [r.consumption_wh / WH_PER_KWH for r in readings],
        "generation_kwh": [r.generation_wh / WH_PER_KWH for r in readings],
    })

    daily = df.groupby("date", sort=True)[["consumption_kwh", "generation_kwh"]].sum()
    # cost comes from the unrounded sum
    daily["cost_usd"] = daily["consumption_kwh"] * RATE_PER_KWH
    daily = daily.sort_index()

    result = [
        DailyAggregate(
            date=str(day),
            consumption_kwh=round2(row.consumption_kwh),
            generation_kwh=round2(row.generation_kwh),
            cost_usd=round2(row.cost_usd),
        )
        for day, row in daily.iterrows()
    ]

    log.debug(
        "Aggregated %d readings into %d days (%s to %s)",
        len(readings), len(result), result[0].date, result[-1].date,
    )
    return result


def to_dataframe(aggregates: list[DailyAggregate]) -> pd.DataFrame:
    """Daily aggregates as a DataFrame with a datetime64 'date' column."""
    df = pd.DataFrame(
        [(a.date, a.consumption_kwh, a.generation_kwh, a.cost_usd) for a in aggregates],
        columns=DAILY_COLUMNS,
    )
    df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d")
    return df


def aggregate_weekly(aggregates: list[DailyAggregate]) -> list[WeeklyAggregate]:
    """
    Roll daily aggregates up into Sunday-start weeks.

    Weekday and weekend consumption are totals for the week, not averages.
    """
    if not aggregates:
        return []

    df = to_dataframe(aggregates)
    days_since_sunday = (df["date"].dt.dayofweek + 1) % 7
    df["week_start"] = (df["date"] - pd.to_timedelta(days_since_sunday, unit="D")).dt.strftime("%Y-%m-%d")
    df["is_weekend"] = df["date"].dt.dayofweek >= 5
    df["weekday_kwh"] = df["consumption_kwh"].where(~df["is_weekend"], 0.0)
    df["weekend_kwh"] = df["consumption_kwh"].where(df["is_weekend"], 0.0)

    weekly = df.groupby("week_start", sort=True).agg(
        total_consumption_kwh=("consumption_kwh", "sum"),
        total_generation_kwh=("generation_kwh", "sum"),
        cost_usd=("cost_usd", "sum"),
        weekday_consumption_kwh=("weekday_kwh", "sum"),
        weekend_consumption_kwh=("weekend_kwh", "sum"),
    )

    return [
        WeeklyAggregate(
            week_start=str(week_start),
            total_consumption_kwh=round2(row.total_consumption_kwh),
            total_generation_kwh=round2(row.total_generation_kwh),
            cost_usd=round2(row.cost_usd),
            weekday_consumption_kwh=round2(row.weekday_consumption_kwh),
            weekend_consumption_kwh=round2(row.weekend_consumption_kwh),
        )
        for week_start, row in weekly.iterrows()
    ]


def find_biggest_use_day(aggregates: list[DailyAggregate]) -> DailyAggregate | None:
    """The first day with the highest consumption, or None."""
    biggest = None
    for day in aggregates:
        if biggest is None or day.consumption_kwh > biggest.consumption_kwh:
            biggest = day
    return biggest


def weekend_weekday_split(aggregates: list[DailyAggregate]) -> dict[str, float]:
    """Total consumption (kWh) on weekend days vs weekdays."""
    split = {"weekend": 0.0, "weekday": 0.0}
    for day in aggregates:
        key = "weekend" if day.day.weekday() >= 5 else "weekday"
        split[key] += day.consumption_kwh
    return {k: round2(v) for k, v in split.items()}
