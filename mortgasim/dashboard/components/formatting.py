"""Shared dashboard formatting helpers."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

CURRENCY_SYMBOL = '£'


def format_currency(value: float) -> str:
    """Whole-pound currency string, e.g. ``£12,345``."""
    sign = '-' if value < 0 else ''
    return f'{sign}{CURRENCY_SYMBOL}{abs(value):,.0f}'


def format_currency_abbreviated(value: float) -> str:
    """Compact money label for chart markers: ``£1.2M``, ``£250K``, ``£12.5K`` or full pounds below 10k."""
    if value >= 1_000_000:
        return f'{CURRENCY_SYMBOL}{value / 1_000_000:.1f}M'
    if value >= 100_000:
        return f'{CURRENCY_SYMBOL}{value / 1000:.0f}K'
    if value >= 10_000:
        return f'{CURRENCY_SYMBOL}{value / 1000:.1f}K'
    return format_currency(value)


def style_numeric_table(
    df: pd.DataFrame,
    *,
    percent_cols: set[str] | None = None,
) -> pd.io.formats.style.Styler | pd.DataFrame:
    """Apply consistent numeric formatting across dashboard tables."""
    if df.empty:
        return df
    percent_cols = percent_cols or set()
    formats: dict[str, str] = {}
    for col in df.columns:
        if not pd.api.types.is_numeric_dtype(df[col]):
            continue
        name = str(col).lower()
        if col in percent_cols or 'rate' in name:
            formats[col] = '{:,.4f}'
        elif name in {'month', 'year'} or 'count' in name:
            formats[col] = '{:,.0f}'
        else:
            formats[col] = '{:,.2f}'
    if not formats:
        return df
    return df.style.format(formats, na_rep='-')


def plot_axis_number_format(fig: go.Figure, *, y_axes: list[str]) -> go.Figure:
    """Apply thousand separators and a currency prefix to selected y-axes."""
    layout = fig.layout
    for axis_name in y_axes:
        axis = getattr(layout, axis_name, None)
        if axis is None:
            continue
        axis.separatethousands = True
        axis.tickprefix = CURRENCY_SYMBOL
    return apply_plot_layout_hygiene(fig)


def apply_plot_layout_hygiene(fig: go.Figure) -> go.Figure:
    """Apply consistent spacing so legends and axis titles do not overlap."""
    fig.update_layout(
        margin=dict(t=72, r=48, b=96, l=72),
        legend=dict(
            orientation='h',
            yanchor='top',
            y=-0.18,
            xanchor='left',
            x=0.0,
            bgcolor='rgba(0,0,0,0)',
        ),
    )
    fig.update_xaxes(automargin=True, title_standoff=14)
    fig.update_yaxes(automargin=True, title_standoff=12)
    return fig
