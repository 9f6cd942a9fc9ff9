"""Plotly rendering of the deal timeline and its variable-rate zones."""

from __future__ import annotations

import plotly.graph_objects as go

from mortgasim.calculations.deal_timeline import DealTimeline
from mortgasim.dashboard.components.formatting import apply_plot_layout_hygiene

DEAL_COLORS = ['#1976d2', '#388e3c', '#f57c00', '#7b1fa2', '#c62828', '#00838f']
SVR_FILL = 'rgba(0,0,0,0.06)'


def deal_color(index: int) -> str:
    return DEAL_COLORS[index % len(DEAL_COLORS)]


def year_tick_step(term_years: float) -> int:
    if term_years <= 10:
        return 1
    if term_years <= 20:
        return 2
    return 5


def build_deal_timeline_figure(timeline: DealTimeline, variable_rate: float, selected_index: int | None = None) -> go.Figure:
    """Horizontal bar of deals over the term with SVR gaps shaded between them."""
    term = timeline.term_months
    fig = go.Figure()

    for start, end in timeline.variable_rate_zones():
        fig.add_shape(
            type='rect',
            x0=start,
            x1=end,
            y0=0,
            y1=1,
            fillcolor=SVR_FILL,
            line=dict(width=1, dash='dash', color='rgba(0,0,0,0.15)'),
            layer='below',
        )
        if end - start > term * 0.06:
            fig.add_annotation(
                x=(start + end) / 2,
                y=0.5,
                text=f'SVR {variable_rate:g}%',
                showarrow=False,
                font=dict(size=10, color='rgba(0,0,0,0.55)'),
            )

    for index, deal in enumerate(timeline.deals):
        color = deal_color(index)
        fig.add_bar(
            x=[deal.duration],
            base=[deal.start_month],
            y=[0.5],
            width=[0.8],
            orientation='h',
            marker=dict(
                color=color,
                opacity=1.0 if index == selected_index else 0.85,
                line=dict(width=3 if index == selected_index else 0, color=color),
            ),
            name=f'{deal.rate:g}%',
            text=[f'{deal.rate:g}% · {deal.duration}mo'],
            textposition='inside',
            insidetextanchor='middle',
            hovertemplate=f'{deal.rate:g}% · months {deal.start_month}-{deal.end_month}<extra></extra>',
            customdata=[index],
        )

    term_years = term / 12
    step = year_tick_step(term_years)
    ticks = list(range(0, int(term_years) + 1, step))
    fig.update_layout(
        height=160,
        showlegend=False,
        barmode='overlay',
        plot_bgcolor='rgba(0,0,0,0)',
        title='Rate Deals',
    )
    fig.update_xaxes(range=[0, term], tickvals=[y * 12 for y in ticks], ticktext=[f'{y}y' for y in ticks])
    fig.update_yaxes(range=[0, 1], visible=False)
    return apply_plot_layout_hygiene(fig)
