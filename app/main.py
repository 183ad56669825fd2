"""
Energy Usage Dashboard

A Streamlit application that turns an interval energy usage CSV into daily
consumption, generation and cost, with date-range filtering, summary
statistics and AI-generated insights.
"""

import os
import streamlit as st

# Bridge Streamlit Cloud secrets into env vars for the insights client
for _key in ("GEMINI_API_KEY", "INSIGHTS_MODEL", "INSIGHTS_TIMEOUT_SECONDS"):
    if _key not in os.environ:
        try:
            os.environ[_key] = str(st.secrets[_key])
        except (KeyError, FileNotFoundError):
            pass

from aggregation import aggregate_weekly, find_biggest_use_day, weekend_weekday_split
from date_range import PRESET_PERIODS
from llm_insights import SummaryStatus
from usage_parser import UsageFileError, ValidationError
from visualizations import create_usage_chart, create_weekly_chart

from common.components import render_insight_cards, render_stat_cards
from common.formatters import format_date_range, format_day, format_kwh
from common.session import DashboardSession, make_cache_key
from common.theme import apply_theme

st.set_page_config(
    page_title="Energy Usage Dashboard",
    page_icon="⚡",
    layout="wide",
)

apply_theme()

_START_KEY = "_range_start"
_END_KEY = "_range_end"
_UNIT_KEY = "_unit_toggle"
_MAX_ROW_ERRORS = 20


# =========================================================================
# Session helpers
# =========================================================================

def _session() -> DashboardSession:
    if "dashboard" not in st.session_state:
        st.session_state.dashboard = DashboardSession()
        st.session_state.uploader_version = 0
    return st.session_state.dashboard


def _sync_range_widgets(session: DashboardSession):
    """Write the session's selection back into the date widgets."""
    if session.selection is not None:
        st.session_state[_START_KEY] = session.selection.start
        st.session_state[_END_KEY] = session.selection.end


def _on_start_change():
    session = _session()
    session.move_start(st.session_state[_START_KEY])
    session.period = "Custom"
    _sync_range_widgets(session)


def _on_end_change():
    session = _session()
    session.move_end(st.session_state[_END_KEY])
    session.period = "Custom"
    _sync_range_widgets(session)


def _on_preset(period: str):
    session = _session()
    session.apply_preset(period)
    _sync_range_widgets(session)


def _on_reset_range():
    session = _session()
    session.reset_range()
    _sync_range_widgets(session)


def _on_unit_toggle():
    _session().toggle_unit()


def _on_reset_data():
    _session().reset()
    st.session_state[_UNIT_KEY] = False
    st.session_state.pop("_insight_error", None)
    # a new key clears the uploader widget
    st.session_state.uploader_version += 1


# =========================================================================
# Sections
# =========================================================================

def show_welcome():
    st.markdown(
        '<div class="welcome-card">'
        '<h3>Welcome to the Energy Usage Dashboard</h3>'
        '<p>Upload an interval usage CSV to see daily consumption, cost and trends.</p>'
        '<p>Expected columns: <code>timestamp, durationSeconds, unit, consumptionWh, '
        'generationWh</code></p>'
        '</div>',
        unsafe_allow_html=True,
    )


def show_upload_error(error: UsageFileError):
    if isinstance(error, ValidationError):
        shown = error.errors[:_MAX_ROW_ERRORS]
        details = "\n".join(f"- {e}" for e in shown)
        more = len(error.errors) - len(shown)
        if more > 0:
            details += f"\n- ...and {more} more"
        st.error(f"{len(error.errors)} rows failed validation. Nothing was loaded.\n\n{details}")
    else:
        st.error(str(error))


def handle_upload(session: DashboardSession):
    uploaded = st.file_uploader(
        "Upload Energy Data (CSV)",
        type=["csv"],
        key=f"_uploader_{st.session_state.uploader_version}",
    )
    if uploaded is None:
        return

    content = uploaded.getvalue()
    if make_cache_key("usage", uploaded.name, content) == session.dataset_key:
        return

    try:
        with st.spinner("Parsing usage file..."):
            result = session.load(content, uploaded.name)
    except UsageFileError as e:
        show_upload_error(e)
        return

    _sync_range_widgets(session)
    st.session_state.pop("_insight_error", None)
    st.toast(f"Loaded {result.reading_count:,} readings across {result.day_count} days")


def show_controls(session: DashboardSession):
    span = session.total_span

    col_toggle, col_span, col_reset = st.columns([1, 2, 1])
    with col_toggle:
        st.toggle("Show cost", key=_UNIT_KEY, on_change=_on_unit_toggle)
    with col_span:
        st.caption(f"Data spans {format_date_range(span)}")
    with col_reset:
        st.button("Reset data", on_click=_on_reset_data, use_container_width=True)

    col_start, col_end, col_presets = st.columns([1, 1, 3])
    with col_start:
        st.date_input(
            "From",
            min_value=span.start,
            max_value=span.end,
            key=_START_KEY,
            on_change=_on_start_change,
        )
    with col_end:
        st.date_input(
            "To",
            min_value=span.start,
            max_value=span.end,
            key=_END_KEY,
            on_change=_on_end_change,
        )
    with col_presets:
        st.write("")
        cols = st.columns(len(PRESET_PERIODS))
        for col, period in zip(cols, PRESET_PERIODS):
            with col:
                if period == "All Data":
                    st.button(period, on_click=_on_reset_range, use_container_width=True)
                else:
                    st.button(period, on_click=_on_preset, args=(period,), use_container_width=True)


def show_overview(session: DashboardSession):
    visible = session.visible
    if not visible:
        st.warning("No data in the selected range. Adjust the dates above.")
        return

    st.subheader("Energy Insights")
    render_stat_cards(session.stats)

    st.plotly_chart(create_usage_chart(visible, session.mode), use_container_width=True)

    with st.expander("Weekly breakdown"):
        biggest = find_biggest_use_day(visible)
        split = weekend_weekday_split(visible)
        c1, c2, c3 = st.columns(3)
        c1.metric("Biggest use day", format_day(biggest.date), format_kwh(biggest.consumption_kwh, 2))
        c2.metric("Weekday total", format_kwh(split["weekday"]))
        c3.metric("Weekend total", format_kwh(split["weekend"]))
        st.plotly_chart(create_weekly_chart(aggregate_weekly(visible)), use_container_width=True)


def show_ai_insights(session: DashboardSession):
    st.subheader("AI Insights")

    if not os.environ.get("GEMINI_API_KEY"):
        st.info("Set GEMINI_API_KEY to enable AI insights.")
        return

    cached = session.insight_cache.get(session.mode)
    col_btn, _ = st.columns([1, 3])
    with col_btn:
        label = "Refresh insights" if cached is not None else "Generate insights"
        clicked = st.button(label, use_container_width=True)

    if clicked:
        with st.spinner("Asking the AI analyst..."):
            if cached is not None:
                result = session.refresh_insights()
            else:
                result = session.request_insights()
        if result.status is SummaryStatus.ERROR:
            st.session_state._insight_error = result.error
        else:
            st.session_state.pop("_insight_error", None)
        cached = session.insight_cache.get(session.mode)

    if cached:
        render_insight_cards(cached)
    elif st.session_state.get("_insight_error"):
        st.warning("Insights unavailable right now. Try again later.")
    elif clicked:
        st.info("No insights available for this data.")


# =========================================================================
# Page
# =========================================================================

session = _session()

st.title("⚡ Energy Usage Dashboard")
handle_upload(session)

if not session.has_data:
    show_welcome()
else:
    show_controls(session)
    show_overview(session)
    show_ai_insights(session)
