"""Plotly figures for the simulation projections returned by the API."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from mortgasim.calculations.overpayments import OverpaymentStore
from mortgasim.dashboard.components.formatting import (
    apply_plot_layout_hygiene,
    format_currency_abbreviated,
    plot_axis_number_format,
)
from mortgasim.dashboard.plots.timeline_plot import year_tick_step
from mortgasim.utils.date_utils import period_index_to_date, to_timestamp, years_to_date

BALANCE_COLOR = '#1976d2'
SAVINGS_COLOR = '#388e3c'
NET_WORTH_COLOR = '#7b1fa2'
OVERPAYMENT_COLOR = '#f57c00'
PENDING_COLOR = 'rgba(245,124,0,0.45)'


def chart_frame(chart_data: dict[str, Any], start_date: str) -> pd.DataFrame:
    """Tabulate the API's parallel ``chart_data`` arrays against calendar dates.

    Series shorter than ``years`` are padded with NaN.
    """
    years = [float(y) for y in chart_data.get('years') or []]
    out = pd.DataFrame({'years': years})
    out['date'] = [years_to_date(y, start_date) for y in years]
    for key in (
        'mortgage_balance',
        'savings_balance',
        'net_worth',
        'monthly_payments',
        'interest_paid',
        'principal_paid',
        'monthly_savings_data',
        'interest_received',
    ):
        values = pd.to_numeric(pd.Series(list(chart_data.get(key) or []), dtype='object'), errors='coerce').astype(float)
        out[key] = values.reindex(range(len(years))).to_numpy()
    return out


def ltv_series(mortgage_balance: pd.Series, asset_value: float) -> pd.Series:
    """Loan-to-value in percent; NaN when the property value is not positive."""
    if asset_value <= 0:
        return pd.Series(np.nan, index=mortgage_balance.index)
    return mortgage_balance.astype(float) / float(asset_value) * 100.0


def starting_age(start_date: str, birth_year: int | None) -> int | None:
    if not birth_year:
        return None
    return int(to_timestamp(start_date).year) - int(birth_year)


def _add_age_axis(fig: go.Figure, frame: pd.DataFrame, start_date: str, start_age: int, y_column: pd.Series) -> None:
    if frame.empty:
        return
    span = float(frame['years'].max())
    step = year_tick_step(span)
    ages = range(start_age, int(np.floor(start_age + span)) + 1, step)
    fig.add_scatter(
        x=frame['date'],
        y=y_column,
        xaxis='x2',
        mode='lines',
        line=dict(width=0),
        showlegend=False,
        hoverinfo='skip',
    )
    fig.update_layout(
        xaxis2=dict(
            title='Age',
            overlaying='x',
            side='top',
            matches='x',
            tickvals=[years_to_date(age - start_age, start_date) for age in ages],
            ticktext=[str(age) for age in ages],
            showgrid=False,
        )
    )


def _add_marker_line(fig: go.Figure, x: pd.Timestamp, label: str, line: dict[str, Any]) -> None:
    # add_vline cannot place annotations on date axes.
    fig.add_shape(type='line', x0=x, x1=x, y0=0, y1=1, xref='x', yref='paper', line=line)
    fig.add_annotation(x=x, y=1, xref='x', yref='paper', text=label, showarrow=False, yanchor='bottom', font=dict(size=10, color=line['color']))


def build_balance_figure(
    frame: pd.DataFrame,
    store: OverpaymentStore | None = None,
    *,
    pending_period: int | None = None,
    start_date: str | None = None,
    birth_year: int | None = None,
) -> go.Figure:
    """Mortgage and savings balances with overpayment markers as vertical lines."""
    fig = go.Figure()
    fig.add_scatter(x=frame['date'], y=frame['mortgage_balance'], mode='lines', name='Mortgage Balance', line=dict(color=BALANCE_COLOR, width=2))
    fig.add_scatter(x=frame['date'], y=frame['savings_balance'], mode='lines', name='Savings Balance', line=dict(color=SAVINGS_COLOR, width=2))

    origin = start_date or (store.start_date if store is not None else None)
    markers = store.markers if store is not None and origin else ()
    for marker in markers:
        _add_marker_line(
            fig,
            period_index_to_date(marker.period_index, origin),
            format_currency_abbreviated(marker.amount),
            dict(color=OVERPAYMENT_COLOR, width=3 if marker.is_dragging else 2, dash='dash'),
        )
    if pending_period is not None and origin:
        _add_marker_line(
            fig,
            period_index_to_date(pending_period, origin),
            'New',
            dict(color=PENDING_COLOR, width=2, dash='dot'),
        )

    start_age = starting_age(origin, birth_year) if origin else None
    if start_age is not None:
        _add_age_axis(fig, frame, origin, start_age, frame['mortgage_balance'])

    fig.update_layout(
        title='Balance Projection',
        xaxis_title='Date',
        yaxis_title='Balance',
        hovermode='x unified',
        clickmode='event+select',
    )
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_net_worth_figure(frame: pd.DataFrame) -> go.Figure:
    fig = go.Figure()
    fig.add_scatter(
        x=frame['date'],
        y=frame['net_worth'],
        mode='lines',
        name='Net Worth',
        fill='tozeroy',
        line=dict(color=NET_WORTH_COLOR, width=2),
    )
    fig.update_layout(title='Net Worth', xaxis_title='Date', yaxis_title='Net Worth')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_payment_schedule_figure(frame: pd.DataFrame) -> go.Figure:
    """Stacked interest and principal per period with the total payment as a line."""
    fig = go.Figure()
    fig.add_bar(x=frame['date'], y=frame['interest_paid'], name='Interest', marker=dict(color='#c62828'))
    fig.add_bar(x=frame['date'], y=frame['principal_paid'], name='Principal', marker=dict(color=BALANCE_COLOR))
    fig.add_scatter(
        x=frame['date'],
        y=frame['monthly_payments'],
        mode='lines',
        name='Monthly Payment',
        line=dict(color='#212121', width=2),
    )
    fig.update_layout(title='Payment Schedule', barmode='stack', xaxis_title='Date', yaxis_title='Amount')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_savings_flow_figure(frame: pd.DataFrame) -> go.Figure:
    fig = go.Figure()
    fig.add_scatter(
        x=frame['date'],
        y=frame['monthly_savings_data'],
        mode='lines',
        name='Monthly Savings',
        line=dict(color=SAVINGS_COLOR, width=2),
    )
    fig.add_scatter(
        x=frame['date'],
        y=frame['interest_received'],
        mode='lines',
        name='Interest Received',
        line=dict(color='#00838f', width=2, dash='dot'),
    )
    fig.update_layout(title='Monthly Savings', xaxis_title='Date', yaxis_title='Amount')
    return plot_axis_number_format(fig, y_axes=['yaxis'])


def build_ltv_figure(
    frame: pd.DataFrame,
    asset_value: float,
    *,
    start_date: str | None = None,
    birth_year: int | None = None,
) -> go.Figure:
    ltv = ltv_series(frame['mortgage_balance'], asset_value)
    fig = go.Figure()
    fig.add_scatter(
        x=frame['date'],
        y=ltv,
        mode='lines',
        name='LTV',
        line=dict(color=BALANCE_COLOR, width=2),
        hovertemplate='LTV: %{y:.1f}%<extra></extra>',
    )
    start_age = starting_age(start_date, birth_year) if start_date else None
    if start_age is not None:
        _add_age_axis(fig, frame, start_date, start_age, ltv)
    fig.update_layout(title='Loan to Value', xaxis_title='Date', yaxis_title='LTV (%)')
    fig.update_yaxes(ticksuffix='%', rangemode='tozero')
    return apply_plot_layout_hygiene(fig)
