"""Reusable UI components for the Energy Usage dashboard.

HTML-rendering helpers for stat cards and AI insight cards.
"""
import html

import streamlit as st

from common.formatters import format_day, format_percentage, format_value
from common.theme import (
    BRAND_ACCENT,
    TEXT_MUTED,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
    TREND_DOWN,
    TREND_UP,
)
from parse_result import AIInsight, InsightStats

INSIGHT_ICONS = {
    "trending_up": "\U0001f4c8",
    "trending_down": "\U0001f4c9",
    "warning": "⚠️",
    "lightbulb": "\U0001f4a1",
}


def stat_card_html(label: str, value: str, help_text: str = "", color: str | None = None) -> str:
    """Render one statistic as a card."""
    style = f' style="color: {color};"' if color else ""
    return (
        f'<div class="stat-card">'
        f'<div class="stat-label">{html.escape(label)}</div>'
        f'<div class="stat-value"{style}>{html.escape(value)}</div>'
        f'<div class="stat-help">{html.escape(help_text)}</div>'
        f'</div>'
    )


def render_stat_cards(stats: InsightStats):
    """Total, average, highest, trend and savings cards in one row."""
    label = stats.mode.label
    # rising usage is bad news
    trend_color = TREND_UP if stats.trend_pct > 0 else TREND_DOWN if stats.trend_pct < 0 else None

    cards = [
        stat_card_html(f"Total {label}", format_value(stats.total, stats.mode),
                       f"Over {stats.day_count} days"),
        stat_card_html(f"Average Daily {label}", format_value(stats.average, stats.mode),
                       "Per day"),
        stat_card_html(f"Highest {label}", format_value(stats.maximum, stats.mode),
                       f"On {format_day(stats.maximum_date)}"),
        stat_card_html("Trend", format_percentage(stats.trend_pct, signed=True),
                       "Last 7 days vs first 7 days", color=trend_color),
        stat_card_html("Potential Savings", format_value(stats.potential_savings, stats.mode),
                       "With a 20% reduction"),
    ]

    for col, card in zip(st.columns(len(cards)), cards):
        with col:
            st.markdown(card, unsafe_allow_html=True)


def render_insight_cards(insights: list[AIInsight]):
    """Render AI insights with their action items and context."""
    for insight in insights:
        icon = INSIGHT_ICONS.get(insight.icon, "•")

        extras = ""
        if insight.potential_savings:
            extras += (
                f'<div style="color: {BRAND_ACCENT}; font-size: 0.85rem; margin-top: 0.4rem;">'
                f'{html.escape(insight.potential_savings)}</div>'
            )
        if insight.action_items:
            items = "".join(f"<li>{html.escape(item)}</li>" for item in insight.action_items)
            extras += (
                f'<ul style="color: {TEXT_SECONDARY}; font-size: 0.85rem; '
                f'margin: 0.4rem 0 0 1rem;">{items}</ul>'
            )
        if insight.historical_context:
            extras += (
                f'<div style="color: {TEXT_MUTED}; font-size: 0.8rem; font-style: italic;">'
                f'{html.escape(insight.historical_context)}</div>'
            )

        card_html = (
            f'<div class="insight-card">'
            f'<div style="color: {TEXT_PRIMARY}; font-weight: 600; margin-bottom: 0.3rem;">'
            f'{icon} {html.escape(insight.title)}</div>'
            f'<div style="color: {TEXT_SECONDARY}; font-size: 0.9rem;">'
            f'{html.escape(insight.description)}</div>'
            f'{extras}</div>'
        )
        st.markdown(card_html, unsafe_allow_html=True)
