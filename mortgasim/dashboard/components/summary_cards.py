"""Summary card renderer for key simulation results."""

from __future__ import annotations

from typing import Any

import streamlit as st

from mortgasim.dashboard.components.formatting import format_currency
from mortgasim.utils.date_utils import period_label


def render_summary_cards(
    summary: dict[str, Any],
    start_date: str,
    warnings: list[str] | None = None,
    title: str = 'Summary',
) -> None:
    """Render top-level result cards plus any API notes."""
    st.subheader(title)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric('Final Net Worth', format_currency(float(summary.get('final_net_worth', 0.0))))
    c2.metric('Final Savings', format_currency(float(summary.get('final_savings_balance', 0.0))))
    c3.metric('Final Mortgage Balance', format_currency(float(summary.get('final_mortgage_balance', 0.0))))
    c4.metric(
        'Lowest Savings',
        format_currency(float(summary.get('min_savings_balance', 0.0))),
        help=f'Month {summary.get("min_savings_month", "-")}',
    )
    paid_off = summary.get('mortgage_paid_off_month')
    if paid_off:
        st.success(f'Mortgage paid off in month {paid_off} ({period_label(int(paid_off), start_date)})')
    fixed_end = summary.get('fixed_term_end_balance')
    if fixed_end is not None:
        st.caption(f'Balance at the end of the first deal: {format_currency(float(fixed_end))}')
    for note in warnings or []:
        st.warning(note)
