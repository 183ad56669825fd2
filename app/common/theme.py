"""Theme configuration for the Energy Usage dashboard.

Provides the light theme CSS and color constants used
by the page, the stat cards and the Plotly chart.
"""
import streamlit as st

# ---------------------------------------------------------------------------
# Color palette
# ---------------------------------------------------------------------------
BRAND_PRIMARY = "#b0d4dc"
BRAND_ACCENT = "#2f7d8c"
TEXT_PRIMARY = "#1a1a1a"
TEXT_SECONDARY = "#515151"
TEXT_MUTED = "#818181"
TREND_UP = "#ef4444"
TREND_DOWN = "#22c55e"

# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------
_THEME_CSS = """
<style>
    @import url('https://fonts.googleapis.com/css2?family=DM+Sans:wght@400;500;600;700&family=JetBrains+Mono:wght@400;500&display=swap');

    .stApp {
        background: #ffffff;
    }

    #MainMenu, footer {visibility: hidden;}

    .main .block-container {
        padding-top: 2rem;
        max-width: 1200px;
    }

    h1, h2, h3, h4 {
        font-family: 'DM Sans', sans-serif !important;
        color: #1a1a1a !important;
        letter-spacing: -0.5px;
    }

    /* Stat cards */
    .stat-card {
        padding: 1rem 1.2rem;
        border: 1px solid #e3e3e3;
        border-radius: 12px;
        background: #ffffff;
        box-shadow: 0 4px 6px -1px rgba(0,0,0,0.1), 0 2px 4px -1px rgba(0,0,0,0.06);
        transition: all 0.2s ease;
    }

    .stat-card:hover {
        transform: translateY(-2px);
        box-shadow: 0 10px 15px -3px rgba(0,0,0,0.1), 0 4px 6px -2px rgba(0,0,0,0.05);
    }

    .stat-card .stat-label {
        color: #818181;
        font-size: 0.9rem;
    }

    .stat-card .stat-value {
        color: #2f7d8c;
        font-family: 'JetBrains Mono', monospace;
        font-size: 1.6rem;
        font-weight: 600;
    }

    .stat-card .stat-help {
        color: #818181;
        font-size: 0.8rem;
    }

    /* Upload prompt shown before any data is loaded */
    .welcome-card {
        text-align: center;
        padding: 2.5rem 2rem;
        border: 2px dashed #c8c8c8;
        border-radius: 12px;
        margin: 1.5rem auto;
        max-width: 640px;
    }

    .welcome-card p {
        color: #666666 !important;
        line-height: 1.6;
    }
</style>
"""


# AI insight cards
_INSIGHT_CSS = f"""
<style>
    .insight-card {{
        padding: 1rem 1.2rem;
        border-left: 4px solid {BRAND_PRIMARY};
        background: #f7f7f7;
        border-radius: 0 8px 8px 0;
        margin-bottom: 0.75rem;
    }}
</style>
"""


def apply_theme():
    """Inject the theme CSS into the current Streamlit page."""
    st.markdown(_THEME_CSS + _INSIGHT_CSS, unsafe_allow_html=True)
