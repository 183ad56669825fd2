"""
Visualization functions for daily energy usage.

All charts use Plotly for interactive visualizations with a light theme
that matches the dashboard.
"""

import pandas as pd
import plotly.graph_objects as go

from aggregation import to_dataframe
from parse_result import DailyAggregate, UnitMode, WeeklyAggregate


COLORS = {
    'consumption': '#2f7d8c',
    'consumption_fill': 'rgba(176, 212, 220, 0.35)',
    'generation': '#22c55e',
    'cost': '#2f7d8c',
    'weekday': '#b0d4dc',
    'weekend': '#2f7d8c',
    'grid': '#e3e3e3',
    'text': '#666666',
    'text_primary': '#1a1a1a',
}

LAYOUT_TEMPLATE = dict(
    paper_bgcolor='rgba(0,0,0,0)',
    plot_bgcolor='rgba(0,0,0,0)',
    font=dict(
        family='DM Sans, -apple-system, BlinkMacSystemFont, sans-serif',
        color=COLORS['text'],
        size=12
    ),
    xaxis=dict(
        gridcolor=COLORS['grid'],
        linecolor=COLORS['grid'],
        tickfont=dict(color=COLORS['text']),
    ),
    yaxis=dict(
        gridcolor=COLORS['grid'],
        linecolor=COLORS['grid'],
        tickfont=dict(color=COLORS['text']),
    ),
    legend=dict(
        bgcolor='rgba(0,0,0,0)',
        font=dict(color=COLORS['text'])
    ),
    hoverlabel=dict(
        bgcolor='#ffffff',
        font_size=13,
        font_family='DM Sans'
    ),
    margin=dict(l=0, r=20, t=40, b=0)
)


def apply_light_theme(fig: go.Figure) -> go.Figure:
    """Apply consistent light theme to a figure."""
    fig.update_layout(**LAYOUT_TEMPLATE)
    return fig


def create_usage_chart(aggregates: list[DailyAggregate], mode: UnitMode) -> go.Figure:
    """
    Daily consumption (kWh) or cost (USD) over the visible date range.

    Generation is drawn alongside consumption when the data has any.
    """
    df = to_dataframe(aggregates)
    fig = go.Figure()

    if mode.is_cost:
        fig.add_trace(go.Scatter(
            x=df['date'],
            y=df['cost_usd'],
            mode='lines',
            name='Cost',
            line=dict(color=COLORS['cost'], width=2.5),
            fill='tozeroy',
            fillcolor=COLORS['consumption_fill'],
            hovertemplate='<b>%{x|%A, %B %d}</b><br>Cost: <b>$%{y:.2f}</b><extra></extra>'
        ))
        y_title = 'Cost (USD)'
    else:
        fig.add_trace(go.Scatter(
            x=df['date'],
            y=df['consumption_kwh'],
            mode='lines',
            name='Consumption',
            line=dict(color=COLORS['consumption'], width=2.5),
            fill='tozeroy',
            fillcolor=COLORS['consumption_fill'],
            hovertemplate='<b>%{x|%A, %B %d}</b><br>Consumption: <b>%{y:.2f} kWh</b><extra></extra>'
        ))
        if df['generation_kwh'].sum() > 0:
            fig.add_trace(go.Scatter(
                x=df['date'],
                y=df['generation_kwh'],
                mode='lines',
                name='Generation',
                line=dict(color=COLORS['generation'], width=2),
                hovertemplate='<b>%{x|%A, %B %d}</b><br>Generation: <b>%{y:.2f} kWh</b><extra></extra>'
            ))
        y_title = 'Energy (kWh)'

    fig.update_layout(
        xaxis_title='',
        yaxis_title=y_title,
        height=400,
        legend=dict(x=0.02, y=0.98),
        hovermode='x unified',
    )
    fig.update_xaxes(tickformat='%b %d')

    return apply_light_theme(fig)


def create_weekly_chart(weekly: list[WeeklyAggregate]) -> go.Figure:
    """Stacked weekday/weekend consumption per week."""
    df = pd.DataFrame([
        {
            'week_start': w.week_start,
            'weekday': w.weekday_consumption_kwh,
            'weekend': w.weekend_consumption_kwh,
        }
        for w in weekly
    ], columns=['week_start', 'weekday', 'weekend'])

    fig = go.Figure()
    for part, label in (('weekday', 'Weekdays'), ('weekend', 'Weekend')):
        fig.add_trace(go.Bar(
            x=df['week_start'],
            y=df[part],
            name=label,
            marker_color=COLORS[part],
            hovertemplate=f'Week of %{{x}}<br>{label}: <b>%{{y:.1f}} kWh</b><extra></extra>'
        ))

    fig.update_layout(
        barmode='stack',
        xaxis_title='',
        yaxis_title='Energy (kWh)',
        height=320,
        legend=dict(orientation='h', y=1.1),
    )
    return apply_light_theme(fig)
