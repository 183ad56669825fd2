"""
Tests for DashboardSession and InsightCache.

Covers the explicit event flow (upload, toggle, range change, reset) and
the per-mode insight cache with stale-response protection.
"""
from datetime import date

import pytest

from common.session import DashboardSession, InsightCache, content_hash, make_cache_key
from llm_insights import SummaryResult, SummaryStatus
from parse_result import AIInsight, DateRange, UnitMode
from usage_parser import NoDataError, ValidationError

HEADER = "timestamp,duration,unit,consumption,generation"


def _csv(days: int, wh: float = 1000.0, month: str = "2024-01") -> str:
    rows = [f"{month}-{d:02d}T12:00:00+00:00,900,wh,{wh * d},0" for d in range(1, days + 1)]
    return "\n".join([HEADER, *rows]) + "\n"


def _insight(title: str) -> AIInsight:
    return AIInsight(title=title, description=f"{title} description")


class FakeSummarizer:
    """Records calls and answers with a canned result."""

    def __init__(self, status=SummaryStatus.SUCCESS, raises=None):
        self.status = status
        self.raises = raises
        self.calls = []

    def __call__(self, aggregates, mode, dataset_key=""):
        self.calls.append((len(aggregates), mode, dataset_key))
        if self.raises is not None:
            raise self.raises
        insights = [_insight(f"{mode.value} #{len(self.calls)}")] if self.status is SummaryStatus.SUCCESS else []
        return SummaryResult(self.status, insights=insights, dataset_key=dataset_key, mode=mode)


# ---------------------------------------------------------------------------
# Cache keys
# ---------------------------------------------------------------------------

class TestCacheKeys:

    def test_content_hash_is_md5(self):
        assert content_hash(b"") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_make_cache_key(self):
        key = make_cache_key("usage", "a.csv", b"abc")
        assert key.startswith("usage_a.csv_3_")
        assert key != make_cache_key("usage", "a.csv", b"abd")


# ---------------------------------------------------------------------------
# InsightCache
# ---------------------------------------------------------------------------

class TestInsightCache:

    def _ok(self, key, mode, title="x"):
        return SummaryResult(SummaryStatus.SUCCESS, insights=[_insight(title)], dataset_key=key, mode=mode)

    def test_store_and_get_per_mode(self):
        cache = InsightCache("ds")
        assert cache.store(self._ok("ds", UnitMode.COST, "cost"))
        assert cache.store(self._ok("ds", UnitMode.CONSUMPTION, "kwh"))
        assert cache.get(UnitMode.COST)[0].title == "cost"
        assert cache.get(UnitMode.CONSUMPTION)[0].title == "kwh"
        assert len(cache) == 2

    def test_stale_dataset_discarded(self):
        cache = InsightCache("new")
        assert not cache.store(self._ok("old", UnitMode.COST))
        assert UnitMode.COST not in cache

    def test_failed_results_not_stored(self):
        cache = InsightCache("ds")
        assert not cache.store(SummaryResult(SummaryStatus.ERROR, dataset_key="ds", mode=UnitMode.COST))
        assert not cache.store(SummaryResult(SummaryStatus.EMPTY, dataset_key="ds", mode=UnitMode.COST))
        assert len(cache) == 0

    def test_refresh_clears_only_one_mode(self):
        cache = InsightCache("ds")
        cache.store(self._ok("ds", UnitMode.COST))
        cache.store(self._ok("ds", UnitMode.CONSUMPTION))
        cache.refresh(UnitMode.COST)
        assert UnitMode.COST not in cache
        assert UnitMode.CONSUMPTION in cache

    def test_invalidate_clears_everything(self):
        cache = InsightCache("ds")
        cache.store(self._ok("ds", UnitMode.COST))
        cache.invalidate("ds2")
        assert len(cache) == 0
        assert cache.dataset_key == "ds2"
        assert not cache.store(self._ok("ds", UnitMode.COST))


# ---------------------------------------------------------------------------
# DashboardSession
# ---------------------------------------------------------------------------

class TestDashboardSessionLoad:

    def test_initial_state(self):
        session = DashboardSession()
        assert not session.has_data
        assert session.daily == []
        assert session.visible == []
        assert session.stats is None
        assert session.total_span is None
        assert session.mode is UnitMode.CONSUMPTION

    def test_load_aggregates_and_selects_everything(self):
        session = DashboardSession()
        result = session.load(_csv(10), "usage.csv")
        assert result.reading_count == 10
        assert result.day_count == 10
        assert session.selection == DateRange(date(2024, 1, 1), date(2024, 1, 10))
        assert session.total_span == session.selection
        assert len(session.visible) == 10
        assert session.dataset_key.startswith("usage_usage.csv_")

    def test_load_accepts_bytes(self):
        session = DashboardSession()
        session.load(_csv(3).encode("utf-8"), "usage.csv")
        assert session.daily[0].consumption_kwh == 1.0

    def test_failed_load_keeps_previous_dataset(self):
        session = DashboardSession()
        session.load(_csv(5), "good.csv")
        key = session.dataset_key

        with pytest.raises(ValidationError):
            session.load(HEADER + "\n2024-01-01,900,kwh,1,0\n", "bad.csv")
        with pytest.raises(NoDataError):
            session.load(HEADER + "\n", "empty.csv")

        assert session.dataset_key == key
        assert len(session.daily) == 5

    def test_new_upload_resets_range(self):
        session = DashboardSession()
        session.load(_csv(10), "a.csv")
        session.move_start(date(2024, 1, 5))
        session.load(_csv(3, month="2024-02"), "b.csv")
        assert session.selection == DateRange(date(2024, 2, 1), date(2024, 2, 3))


class TestDashboardSessionIntents:

    @pytest.fixture
    def session(self):
        s = DashboardSession()
        s.load(_csv(20), "usage.csv")
        return s

    def test_toggle_unit(self, session):
        assert session.toggle_unit() is UnitMode.COST
        assert session.stats.mode is UnitMode.COST
        assert session.toggle_unit() is UnitMode.CONSUMPTION

    def test_range_change_filters_visible_and_stats(self, session):
        session.move_start(date(2024, 1, 5))
        session.move_end(date(2024, 1, 10))
        assert [a.date for a in session.visible][0] == "2024-01-05"
        assert len(session.visible) == 6
        # consumption on day d is d kWh
        assert session.stats.total == pytest.approx(sum(range(5, 11)))
        # span shown to the user still covers all data
        assert session.total_span == DateRange(date(2024, 1, 1), date(2024, 1, 20))

    def test_clamp_through_session(self, session):
        session.move_end(date(2024, 1, 10))
        session.move_start(date(2024, 1, 15))
        assert session.selection == DateRange(date(2024, 1, 10), date(2024, 1, 10))

    def test_preset_and_reset_range(self, session):
        session.apply_preset("Last 7 Days")
        assert session.selection == DateRange(date(2024, 1, 14), date(2024, 1, 20))
        assert session.period == "Last 7 Days"
        session.reset_range()
        assert session.selection == DateRange(date(2024, 1, 1), date(2024, 1, 20))
        assert session.period == "All Data"

    def test_range_outside_data_gives_no_stats(self, session):
        session.selection = DateRange(date(2023, 1, 1), date(2023, 1, 2))
        assert session.visible == []
        assert session.stats is None

    def test_reset_clears_everything(self, session):
        session.toggle_unit()
        session.reset()
        assert not session.has_data
        assert session.mode is UnitMode.CONSUMPTION
        assert session.selection is None
        assert session.dataset_key == ""

    def test_range_moves_without_data_are_ignored(self):
        session = DashboardSession()
        assert session.move_start(date(2024, 1, 1)) is None
        assert session.apply_preset("Last 7 Days") is None


class TestDashboardSessionInsights:

    @pytest.fixture
    def session(self):
        s = DashboardSession()
        s.load(_csv(10), "usage.csv")
        return s

    def test_cached_per_mode_when_toggling(self, session):
        summarizer = FakeSummarizer()

        first = session.request_insights(summarizer)
        session.toggle_unit()
        second = session.request_insights(summarizer)
        session.toggle_unit()
        third = session.request_insights(summarizer)

        assert [c[1] for c in summarizer.calls] == [UnitMode.CONSUMPTION, UnitMode.COST]
        assert first.ok and second.ok and third.ok
        assert third.insights == first.insights

    def test_summarizer_gets_full_dataset_and_key(self, session):
        summarizer = FakeSummarizer()
        session.move_start(date(2024, 1, 8))
        session.request_insights(summarizer)
        assert summarizer.calls == [(10, UnitMode.CONSUMPTION, session.dataset_key)]

    def test_refresh_calls_again_for_current_mode_only(self, session):
        summarizer = FakeSummarizer()
        session.request_insights(summarizer)
        session.toggle_unit()
        session.request_insights(summarizer)

        refreshed = session.refresh_insights(summarizer)
        assert len(summarizer.calls) == 3
        assert refreshed.insights[0].title == "cost #3"
        assert UnitMode.CONSUMPTION in session.insight_cache

    def test_new_upload_invalidates_cache(self, session):
        summarizer = FakeSummarizer()
        session.request_insights(summarizer)
        session.load(_csv(4, month="2024-03"), "other.csv")
        assert len(session.insight_cache) == 0
        session.request_insights(summarizer)
        assert len(summarizer.calls) == 2

    def test_reset_invalidates_cache(self, session):
        session.request_insights(FakeSummarizer())
        session.reset()
        assert len(session.insight_cache) == 0
        assert session.request_insights(FakeSummarizer()).status is SummaryStatus.EMPTY

    def test_failures_are_not_cached(self, session):
        failing = FakeSummarizer(status=SummaryStatus.ERROR)
        assert session.request_insights(failing).status is SummaryStatus.ERROR
        assert session.request_insights(failing).status is SummaryStatus.ERROR
        assert len(failing.calls) == 2

    def test_summarizer_exception_becomes_error_result(self, session):
        broken = FakeSummarizer(raises=RuntimeError("boom"))
        result = session.request_insights(broken)
        assert result.status is SummaryStatus.ERROR
        assert "boom" in result.error
        # the pipeline is unaffected
        assert session.stats is not None

    @pytest.mark.parametrize("returned", [None, [], "insights", {"insights": []}])
    def test_malformed_summarizer_result_becomes_error(self, session, returned):
        result = session.request_insights(lambda *args, **kwargs: returned)
        assert result.status is SummaryStatus.ERROR
        assert result.error == "Malformed summarizer result"
        assert result.dataset_key == session.dataset_key
        assert len(session.insight_cache) == 0

    def test_stale_response_does_not_land_in_new_dataset(self, session):
        old_key = session.dataset_key
        session.load(_csv(4, month="2024-03"), "other.csv")
        late = SummaryResult(
            SummaryStatus.SUCCESS, insights=[_insight("late")],
            dataset_key=old_key, mode=UnitMode.CONSUMPTION,
        )
        assert not session.insight_cache.store(late)
        assert UnitMode.CONSUMPTION not in session.insight_cache
