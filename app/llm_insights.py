"""
AI Usage Insights
=================

Asks Gemini for a short list of natural-language insights about the daily
aggregates currently loaded. Daily values are folded into monthly summaries
first to keep the request small.

Every failure (missing key, missing package, network error, timeout,
unparseable output) comes back as a SummaryResult with status ERROR or EMPTY.
Nothing here raises into the aggregation pipeline.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from aggregation import round2
from parse_result import AIInsight, DailyAggregate, UnitMode

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT_SECONDS = 30.0

_SUMMARY_PROMPT = (
    "You are an energy analyst. The user's message is JSON with monthly "
    "energy summaries (monthlyData) and a flag (showCost) saying whether the "
    "values are costs in USD or consumption in kWh.\n"
    "Return a JSON array of exactly 3 insights. Each insight is an object with "
    "title, description, icon (one of trending_up, trending_down, warning, "
    "lightbulb), actionItems (a list of short strings) and historicalContext.\n"
    "Reference specific numbers and months from the data."
)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


# ---------------------------------------------------------------------------
# Wire schema
# ---------------------------------------------------------------------------

class LLMInsightSchema(BaseModel):
    """One insight as returned by the model."""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    icon: str = "lightbulb"
    action_items: Optional[list[str]] = Field(default=None, alias="actionItems")
    historical_context: Optional[str] = Field(default=None, alias="historicalContext")
    potential_savings: Optional[str] = Field(default=None, alias="potentialSavings")
    location_impact: Optional[str] = Field(default=None, alias="locationImpact")

    def to_insight(self) -> AIInsight:
        return AIInsight(
            title=self.title,
            description=self.description,
            icon=self.icon,
            action_items=list(self.action_items or []),
            historical_context=self.historical_context,
            potential_savings=self.potential_savings,
            location_impact=self.location_impact,
        )


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

class SummaryStatus(Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class SummaryResult:
    """Outcome of one summarizer call, tagged with what it was issued for."""
    status: SummaryStatus
    insights: list[AIInsight] = field(default_factory=list)
    error: str = ""
    dataset_key: str = ""
    mode: Optional[UnitMode] = None
    model_used: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SummaryStatus.SUCCESS


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------

def summarize_months(aggregates: list[DailyAggregate], mode: UnitMode) -> list[dict]:
    """Fold daily values by YYYY-MM into total/average/max/min summaries."""
    months: dict[str, dict] = {}
    for day in aggregates:
        month = day.date[:7]
        value = day.value(mode)
        stats = months.get(month)
        if stats is None:
            stats = months[month] = {
                "total": 0.0, "days": 0,
                "max": value, "max_date": day.date,
                "min": value, "min_date": day.date,
            }
        stats["total"] += value
        stats["days"] += 1
        if value > stats["max"]:
            stats["max"], stats["max_date"] = value, day.date
        if value < stats["min"]:
            stats["min"], stats["min_date"] = value, day.date

    return [
        {
            "month": month,
            "total": round2(s["total"]),
            "average": round2(s["total"] / s["days"]),
            "max": s["max"],
            "max_date": s["max_date"],
            "min": s["min"],
            "min_date": s["min_date"],
        }
        for month, s in sorted(months.items())
    ]


def build_request(aggregates: list[DailyAggregate], mode: UnitMode) -> dict:
    return {
        "monthlyData": summarize_months(aggregates, mode),
        "showCost": mode.is_cost,
    }


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def _load_json(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = _FENCED_JSON.search(text)
        if match:
            return json.loads(match.group(1))
        raise


def parse_insights(text: str) -> list[AIInsight]:
    """
    Parse model output into insights.

    Accepts a JSON array, an object with an "insights" array, a single
    insight object, or any of those inside a fenced markdown block.
    Items that do not look like insights are dropped.

    Raises:
        ValueError: the text holds no JSON at all.
    """
    try:
        payload = _load_json(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse AI response: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("insights", [payload])
    if not isinstance(payload, list):
        return []

    insights = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            insights.append(LLMInsightSchema.model_validate(item).to_insight())
        except ValidationError as e:
            log.debug("Dropping malformed insight: %s", e)
    return insights


# ---------------------------------------------------------------------------
# Gemini call
# ---------------------------------------------------------------------------

def _get_gemini_client():
    """Create a Gemini client. Requires GEMINI_API_KEY env var."""
    try:
        from google import genai
    except ImportError:
        raise RuntimeError(
            "google-genai package not installed. Run: pip install google-genai"
        )

    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        raise RuntimeError(
            "GEMINI_API_KEY environment variable not set. "
            "Set it to your Google AI Studio API key."
        )

    return genai.Client(api_key=api_key)


def _timeout_seconds() -> float:
    raw = os.environ.get("INSIGHTS_TIMEOUT_SECONDS", "").strip()
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS


async def summarize(
    aggregates: list[DailyAggregate],
    mode: UnitMode,
    dataset_key: str = "",
    model: str | None = None,
    timeout: float | None = None,
) -> SummaryResult:
    """Ask Gemini for insights about `aggregates`.

    Args:
        aggregates: Daily aggregates to describe.
        mode: Whether the insights should talk about cost or consumption.
        dataset_key: Tag copied onto the result so stale responses can be
            recognised by the caller.
        model: Gemini model; defaults to INSIGHTS_MODEL or gemini-2.0-flash.
        timeout: Seconds before giving up; defaults to INSIGHTS_TIMEOUT_SECONDS.

    Returns:
        SummaryResult. Never raises.
    """
    model = model or os.environ.get("INSIGHTS_MODEL", DEFAULT_MODEL)
    timeout = timeout or _timeout_seconds()
    tag = {"dataset_key": dataset_key, "mode": mode, "model_used": model}

    if not aggregates:
        return SummaryResult(SummaryStatus.EMPTY, **tag)

    try:
        client = _get_gemini_client()
        response = await asyncio.wait_for(
            client.aio.models.generate_content(
                model=model,
                contents=[_SUMMARY_PROMPT, json.dumps(build_request(aggregates, mode))],
                config={
                    "response_mime_type": "application/json",
                    "temperature": 0.3,
                    "max_output_tokens": 1000,
                },
            ),
            timeout=timeout,
        )
        text = response.text
        if not text:
            raise ValueError("No response from AI service")
        insights = parse_insights(text)
    except asyncio.TimeoutError:
        log.warning("Gemini insights timed out after %.0fs", timeout)
        return SummaryResult(SummaryStatus.ERROR, error=f"Timed out after {timeout:.0f}s", **tag)
    except Exception as e:
        log.warning("Gemini insights failed: %s", e)
        return SummaryResult(SummaryStatus.ERROR, error=str(e), **tag)

    if not insights:
        return SummaryResult(SummaryStatus.EMPTY, **tag)
    return SummaryResult(SummaryStatus.SUCCESS, insights=insights, **tag)


def fetch_insights(
    aggregates: list[DailyAggregate],
    mode: UnitMode,
    dataset_key: str = "",
    model: str | None = None,
    timeout: float | None = None,
) -> SummaryResult:
    """Blocking wrapper around summarize() for the Streamlit script thread."""
    return asyncio.run(summarize(aggregates, mode, dataset_key, model, timeout))
