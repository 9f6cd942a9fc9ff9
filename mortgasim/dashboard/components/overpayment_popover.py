"""Balance chart with click-to-add overpayments and the amount popover."""

from __future__ import annotations

from typing import Any

import pandas as pd
import streamlit as st

from mortgasim.calculations.chart_interaction import OverpaymentPopover, popover_for_period
from mortgasim.calculations.overpayments import OverpaymentStore
from mortgasim.dashboard.components.formatting import format_currency
from mortgasim.dashboard.plots.projection_plots import build_balance_figure
from mortgasim.utils.date_utils import date_to_period_index, period_label
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

POPOVER_KEY = 'overpayment_popover'
LAST_SELECTION_KEY = 'overpayment_last_selection'


def period_from_selection(event: Any, start_date: str, max_period: int) -> int | None:
    """Period index of the first selected point of a plotly selection event, clamped to ``[1, max_period]``."""
    if not event:
        return None
    selection = event.get('selection') if isinstance(event, dict) else getattr(event, 'selection', None)
    if not selection:
        return None
    points = selection.get('points') if isinstance(selection, dict) else getattr(selection, 'points', None)
    if not points:
        return None
    x = points[0].get('x')
    ts = pd.to_datetime(x, errors='coerce')
    if pd.isna(ts):
        return None
    return max(1, min(int(max_period), date_to_period_index(ts, start_date)))


def consume_selection(period_index: int | None, last_selection: int | None) -> tuple[int | None, int | None]:
    """Return ``(period to open, selection to remember)``.

    A selected point opens a popover once; it stays consumed after the popover
    closes until the chart selection is cleared or a different point is picked.
    """
    if period_index is None:
        return None, None
    if period_index == last_selection:
        return None, last_selection
    return period_index, period_index


def _render_popover(popover: OverpaymentPopover, start_date: str) -> bool:
    """Draw the open popover; returns whether the store changed."""
    title = 'Add overpayment' if popover.is_new else 'Edit overpayment'
    changed = False
    with st.container(border=True):
        st.markdown(f'**{title}** · {period_label(popover.period_index, start_date)} (month {popover.period_index})')
        text = st.text_input('Amount (£)', value=popover.input_text, key=f'popover_amount_{popover.period_index}')
        popover.set_input(text)
        if popover.error:
            st.error(popover.error)
        c1, c2, c3 = st.columns(3)
        if c1.button('Confirm', key='popover_confirm', type='primary'):
            changed = popover.confirm() is not None
        if not popover.is_new and c2.button('Delete', key='popover_delete'):
            changed = popover.delete()
        if c3.button('Cancel', key='popover_cancel'):
            popover.cancel()
    return changed


def _render_marker_list(store: OverpaymentStore, max_period: int) -> bool:
    changed = False
    if not store.markers:
        st.caption('Click the balance chart to add a one-off overpayment.')
        return changed
    rows = [
        {'Date': m.date_label, 'Month': m.period_index, 'Amount': format_currency(m.amount)}
        for m in store.markers
    ]
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
    c1, c2, c3 = st.columns([3, 2, 1])
    ids = [m.id for m in store.markers]
    labels = {m.id: f'{m.date_label} · {format_currency(m.amount)}' for m in store.markers}
    with c1:
        marker_id = st.selectbox('Overpayment', ids, format_func=lambda i: labels.get(i, i), key='overpayment_move_id')
    with c2:
        target = st.number_input('Move to month', min_value=1, max_value=int(max_period), step=1, key='overpayment_move_to')
    with c3:
        if st.button('Move', key='overpayment_move_apply'):
            if store.update(marker_id, period_index=int(target)) is None:
                st.warning(f'Month {int(target)} already has an overpayment')
            else:
                changed = True
    if st.button('Clear all overpayments', key='overpayment_clear_all'):
        store.clear_all()
        changed = True
    return changed


def render_overpayment_panel(
    store: OverpaymentStore,
    frame: pd.DataFrame,
    start_date: str,
    max_period: int,
    birth_year: int | None = None,
) -> dict[str, Any]:
    """Render the interactive balance chart and return ``{'changed': bool}``."""
    actions: dict[str, Any] = {'changed': False}
    popover: OverpaymentPopover | None = st.session_state.get(POPOVER_KEY)
    if popover is not None and (not popover.is_open or popover.store is not store):
        popover = None
        st.session_state.pop(POPOVER_KEY, None)

    fig = build_balance_figure(
        frame,
        store,
        pending_period=popover.period_index if popover is not None and popover.is_new else None,
        start_date=start_date,
        birth_year=birth_year,
    )
    event = st.plotly_chart(
        fig,
        use_container_width=True,
        on_select='rerun',
        selection_mode=('points',),
        key='balance_chart',
    )
    to_open, remembered = consume_selection(
        period_from_selection(event, start_date, max_period),
        st.session_state.get(LAST_SELECTION_KEY),
    )
    st.session_state[LAST_SELECTION_KEY] = remembered
    if to_open is not None:
        popover = popover_for_period(store, to_open)
        st.session_state[POPOVER_KEY] = popover
        LOGGER.debug('Opened %s popover at period %s', 'add' if popover.is_new else 'edit', to_open)

    if popover is not None and popover.is_open:
        actions['changed'] = _render_popover(popover, start_date)
        if not popover.is_open:
            st.session_state.pop(POPOVER_KEY, None)

    actions['changed'] |= _render_marker_list(store, max_period)
    return actions
