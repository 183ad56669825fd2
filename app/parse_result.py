"""
Shared data structures for energy usage data.

Used by the parser, the aggregator, the range filter and the insights
engine so every stage speaks the same types.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class UnitMode(Enum):
    """Which daily figure the dashboard is showing."""
    CONSUMPTION = "consumption"
    COST = "cost"

    @property
    def is_cost(self) -> bool:
        return self is UnitMode.COST

    @property
    def label(self) -> str:
        return "Cost" if self.is_cost else "Consumption"

    def toggled(self) -> "UnitMode":
        return UnitMode.CONSUMPTION if self.is_cost else UnitMode.COST


@dataclass(frozen=True)
class Reading:
    """One validated interval record, values in watt-hours."""
    timestamp: str
    duration_seconds: float
    unit: str
    consumption_wh: float
    generation_wh: float

    @property
    def date_key(self) -> str:
        return self.timestamp[:10]


@dataclass(frozen=True)
class DailyAggregate:
    """One calendar day of readings, rounded to 2 decimals."""
    date: str                 # YYYY-MM-DD
    consumption_kwh: float
    generation_kwh: float
    cost_usd: float

    def value(self, mode: UnitMode) -> float:
        return self.cost_usd if mode.is_cost else self.consumption_kwh

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)


@dataclass(frozen=True)
class WeeklyAggregate:
    """Daily aggregates rolled up by Sunday-start week."""
    week_start: str
    total_consumption_kwh: float
    total_generation_kwh: float
    cost_usd: float
    weekday_consumption_kwh: float
    weekend_consumption_kwh: float


@dataclass(frozen=True)
class DateRange:
    """Inclusive date interval. start <= end is kept by date_range helpers."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class InsightStats:
    """Closed-form statistics over the visible aggregates."""
    mode: UnitMode
    total: float
    average: float
    maximum: float
    maximum_date: str
    trend_pct: float
    potential_savings: float
    day_count: int


@dataclass
class AIInsight:
    """A natural-language insight returned by the remote summarizer."""
    title: str
    description: str
    icon: str = "lightbulb"
    action_items: list[str] = field(default_factory=list)
    historical_context: Optional[str] = None
    potential_savings: Optional[str] = None
    location_impact: Optional[str] = None


@dataclass
class ParseResult:
    """Output of loading one uploaded file."""
    readings: list[Reading]
    daily: list[DailyAggregate]
    original_filename: str = ""
    content_key: str = ""

    @property
    def reading_count(self) -> int:
        return len(self.readings)

    @property
    def day_count(self) -> int:
        return len(self.daily)
