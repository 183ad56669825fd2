"""Session state for the Energy Usage dashboard.

DashboardSession owns everything one browser session holds: the loaded
dataset, the unit mode, the date selection and the AI insight cache. Each
user intent is a method, and derived views are recomputed from scratch
when read.
"""
from __future__ import annotations

import hashlib
import logging
from datetime import date
from typing import Callable

from aggregation import aggregate_daily
from date_range import (
    ALL_DATA,
    dataset_bounds,
    filter_by_range,
    move_end,
    move_start,
    preset_range,
)
from insights import compute_insights
from llm_insights import SummaryResult, SummaryStatus, fetch_insights
from parse_result import (
    AIInsight,
    DailyAggregate,
    DateRange,
    InsightStats,
    ParseResult,
    UnitMode,
)
from usage_parser import parse_usage_file

log = logging.getLogger(__name__)

Summarizer = Callable[..., SummaryResult]


def content_hash(data: bytes) -> str:
    """Return the MD5 hex digest of raw bytes (for cache keys)."""
    return hashlib.md5(data).hexdigest()


def make_cache_key(prefix: str, filename: str, content: bytes) -> str:
    """Build a deterministic cache key from prefix + filename + content hash."""
    return f"{prefix}_{filename}_{len(content)}_{content_hash(content)}"


class InsightCache:
    """Last successful AI insights per unit mode, for one dataset."""

    def __init__(self, dataset_key: str = ""):
        self.dataset_key = dataset_key
        self._entries: dict[UnitMode, list[AIInsight]] = {}

    def __contains__(self, mode: UnitMode) -> bool:
        return mode in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, mode: UnitMode) -> list[AIInsight] | None:
        return self._entries.get(mode)

    def invalidate(self, dataset_key: str = "") -> None:
        """Forget everything; results for other datasets are ignored from now on."""
        self.dataset_key = dataset_key
        self._entries.clear()

    def refresh(self, mode: UnitMode) -> None:
        self._entries.pop(mode, None)

    def store(self, result: SummaryResult) -> bool:
        """Keep a successful result issued for the current dataset.

        Returns True if the result was stored.
        """
        if result.dataset_key != self.dataset_key:
            log.info("Discarding stale insights for dataset %s", result.dataset_key)
            return False
        if not result.ok or result.mode is None:
            return False
        self._entries[result.mode] = list(result.insights)
        return True


class DashboardSession:
    """One user's dashboard state and the operations that change it."""

    def __init__(self):
        self.result: ParseResult | None = None
        self.mode = UnitMode.CONSUMPTION
        self.selection: DateRange | None = None
        self.period = ALL_DATA
        self.insight_cache = InsightCache()

    # -- dataset -----------------------------------------------------------

    @property
    def has_data(self) -> bool:
        return self.result is not None

    @property
    def daily(self) -> list[DailyAggregate]:
        return self.result.daily if self.result else []

    @property
    def dataset_key(self) -> str:
        return self.result.content_key if self.result else ""

    def load(self, file_content: bytes | str, filename: str = "") -> ParseResult:
        """Parse and aggregate an upload, replacing the current dataset.

        Parser errors propagate and leave the current dataset untouched.
        """
        raw = file_content.encode("utf-8") if isinstance(file_content, str) else file_content
        readings = parse_usage_file(raw)
        daily = aggregate_daily(readings)

        self.result = ParseResult(
            readings=readings,
            daily=daily,
            original_filename=filename,
            content_key=make_cache_key("usage", filename, raw),
        )
        self.period = ALL_DATA
        self.selection = dataset_bounds(daily)
        self.insight_cache.invalidate(self.dataset_key)
        log.info("Loaded %s: %d readings, %d days", filename or "upload", len(readings), len(daily))
        return self.result

    def reset(self) -> None:
        self.result = None
        self.mode = UnitMode.CONSUMPTION
        self.selection = None
        self.period = ALL_DATA
        self.insight_cache.invalidate()

    # -- user intents ------------------------------------------------------

    def toggle_unit(self) -> UnitMode:
        self.mode = self.mode.toggled()
        return self.mode

    def move_start(self, new_start: date) -> DateRange | None:
        if self.selection is not None:
            self.selection = move_start(self.selection, new_start)
        return self.selection

    def move_end(self, new_end: date) -> DateRange | None:
        if self.selection is not None:
            self.selection = move_end(self.selection, new_end)
        return self.selection

    def reset_range(self) -> DateRange | None:
        self.period = ALL_DATA
        self.selection = dataset_bounds(self.daily)
        return self.selection

    def apply_preset(self, period: str) -> DateRange | None:
        bounds = dataset_bounds(self.daily)
        if bounds is None:
            return None
        self.selection = preset_range(bounds, period)
        self.period = period
        return self.selection

    # -- derived views -----------------------------------------------------

    @property
    def total_span(self) -> DateRange | None:
        return dataset_bounds(self.daily)

    @property
    def visible(self) -> list[DailyAggregate]:
        return filter_by_range(self.daily, self.selection)

    @property
    def stats(self) -> InsightStats | None:
        visible = self.visible
        if not visible:
            return None
        return compute_insights(visible, self.mode)

    # -- AI insights -------------------------------------------------------

    def request_insights(self, summarizer: Summarizer = fetch_insights) -> SummaryResult:
        """Cached insights for the current mode, calling the summarizer on a miss."""
        key, mode = self.dataset_key, self.mode
        if not self.daily:
            return SummaryResult(SummaryStatus.EMPTY, dataset_key=key, mode=mode)

        cached = self.insight_cache.get(mode)
        if cached is not None:
            log.info("Insight cache hit for %s", mode.value)
            return SummaryResult(SummaryStatus.SUCCESS, insights=cached, dataset_key=key, mode=mode)

        log.info("Insight cache miss for %s", mode.value)
        try:
            result = summarizer(self.daily, mode, dataset_key=key)
        except Exception as e:
            log.warning("Insight summarizer failed: %s", e, exc_info=True)
            return SummaryResult(SummaryStatus.ERROR, error=str(e), dataset_key=key, mode=mode)
        if not isinstance(result, SummaryResult):
            log.warning("Insight summarizer returned %s", type(result).__name__)
            return SummaryResult(
                SummaryStatus.ERROR, error="Malformed summarizer result", dataset_key=key, mode=mode,
            )
        self.insight_cache.store(result)
        return result

    def refresh_insights(self, summarizer: Summarizer = fetch_insights) -> SummaryResult:
        self.insight_cache.refresh(self.mode)
        return self.request_insights(summarizer)
