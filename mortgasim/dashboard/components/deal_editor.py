"""Deal timeline widget: figure, companion list editor and add/remove actions."""

from __future__ import annotations

from typing import Any

import pandas as pd
import streamlit as st

from mortgasim.calculations.deal_timeline import DealTimeline
from mortgasim.calculations.timeline_drag import TimelineDragController, TimelineGeometry
from mortgasim.dashboard.components.controls import stable_selectbox
from mortgasim.dashboard.plots.timeline_plot import build_deal_timeline_figure
from mortgasim.models.deal import Deal
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEAL_COLUMNS = ['Start Month', 'End Month', 'Rate (%)']
DEFAULT_NEW_DEAL_RATE = 4.5


def deals_to_editor(timeline: DealTimeline) -> pd.DataFrame:
    return pd.DataFrame(
        [[d.start_month, d.end_month, d.rate] for d in timeline.deals],
        columns=DEAL_COLUMNS,
    )


def apply_deal_row(timeline: DealTimeline, index: int, start: int, end: int, rate: float) -> bool:
    """Apply one edited list row as a single all-or-nothing replacement."""
    original = timeline.deals[index]
    if (start, end, rate) == (original.start_month, original.end_month, original.rate):
        return False
    return timeline.place(index, Deal(start_month=start, end_month=end, rate=rate)) is not None


def drag_deal_to_range(timeline: DealTimeline, index: int, start: int, end: int) -> int | None:
    """Replay a range-slider change as pointer drags on a one-pixel-per-month bar.

    A change that keeps the duration is a move; otherwise each changed edge is
    a resize. Returns the deal's index afterwards, or ``None`` when every step
    was rejected.
    """
    deal = timeline.deals[index]
    controller = TimelineDragController(timeline, TimelineGeometry(left=0.0, width=float(timeline.term_months)))
    if end - start == deal.duration:
        steps = [('move', deal.start_month, start)]
    else:
        steps = [
            (mode, old, new)
            for mode, old, new in (('resize-start', deal.start_month, start), ('resize-end', deal.end_month, end))
            if old != new
        ]
    changed = False
    current = index
    for mode, old, new in steps:
        controller.pointer_down(current, mode, float(old))
        changed |= controller.pointer_move(float(new))
        current = controller.selected_index
        controller.pointer_up()
    return current if changed else None


def apply_deal_table_edits(timeline: DealTimeline, edited: pd.DataFrame) -> tuple[bool, list[str]]:
    """Push list-editor rows into the timeline.

    Returns ``(changed, rejected)`` where ``rejected`` holds a message per row
    that would break the term bounds, the rate range, or the no-overlap rule.
    """
    changed = False
    rejected: list[str] = []
    if edited is None or edited.empty:
        return changed, rejected
    snapshot = timeline.deals
    for row_pos, (_, row) in enumerate(edited.iterrows()):
        if row_pos >= len(snapshot):
            break
        start = pd.to_numeric(row.get('Start Month'), errors='coerce')
        end = pd.to_numeric(row.get('End Month'), errors='coerce')
        rate = pd.to_numeric(row.get('Rate (%)'), errors='coerce')
        if pd.isna(start) or pd.isna(end) or pd.isna(rate):
            rejected.append(f'Deal {row_pos + 1}: all fields are required')
            continue
        index = timeline.index_of(snapshot[row_pos])
        if index is None:
            continue
        current = timeline.deals[index]
        if (int(start), int(end), float(rate)) == (current.start_month, current.end_month, current.rate):
            continue
        if apply_deal_row(timeline, index, int(start), int(end), float(rate)):
            changed = True
        else:
            rejected.append(
                f'Deal {row_pos + 1}: months {int(start)}-{int(end)} at {float(rate):g}% '
                f'overlaps another deal or leaves the {timeline.term_months}-month term'
            )
    return changed, rejected


def render_deal_editor(timeline: DealTimeline, variable_rate: float, *, key_prefix: str = 'deals') -> dict[str, Any]:
    """Render the timeline figure, list editor and add, remove and drag controls."""
    actions: dict[str, Any] = {'changed': False, 'rejected': []}

    st.subheader('Rate Deals')
    selected = st.session_state.get(f'{key_prefix}_selected')
    if selected is not None and not 0 <= selected < len(timeline):
        selected = None
    st.plotly_chart(build_deal_timeline_figure(timeline, variable_rate, selected), use_container_width=True)

    editor_df = st.data_editor(
        deals_to_editor(timeline),
        hide_index=True,
        use_container_width=True,
        disabled=False,
        num_rows='fixed',
        column_config={
            'Start Month': st.column_config.NumberColumn(min_value=0, max_value=timeline.term_months, step=1),
            'End Month': st.column_config.NumberColumn(min_value=1, max_value=timeline.term_months, step=1),
            'Rate (%)': st.column_config.NumberColumn(min_value=0.0, max_value=15.0, step=0.05, format='%.2f'),
        },
        key=f'{key_prefix}_editor_{st.session_state.get(f"{key_prefix}_revision", 0)}',
    )
    changed, rejected = apply_deal_table_edits(timeline, editor_df)
    actions['changed'] |= changed
    actions['rejected'] += rejected
    for message in rejected:
        st.warning(message)

    c1, c2, c3 = st.columns([2, 2, 2])
    gap = timeline.find_first_gap()
    with c1:
        new_rate = st.number_input(
            'New deal rate (%)',
            min_value=0.0,
            max_value=15.0,
            value=DEFAULT_NEW_DEAL_RATE,
            step=0.05,
            key=f'{key_prefix}_new_rate',
        )
        if gap is None:
            st.caption('No free months left on the timeline.')
        else:
            st.caption(f'Will be placed at months {gap[0]}-{gap[1]}.')
        if st.button('Add deal', key=f'{key_prefix}_add', disabled=gap is None):
            deal = timeline.add(float(new_rate))
            if deal is not None:
                LOGGER.info('Added deal %s', deal)
                actions['changed'] = True

    options = list(range(len(timeline)))
    index = None
    followed = st.session_state.pop(f'{key_prefix}_selected_next', None)
    if followed is not None:
        st.session_state[f'{key_prefix}_selected'] = followed
    with c2:
        if options:
            index = stable_selectbox(
                label='Selected deal',
                options=options,
                key=f'{key_prefix}_selected',
                default=0,
                format_func=lambda i: f'{i + 1}: {timeline.deals[i].start_month}-{timeline.deals[i].end_month} @ {timeline.deals[i].rate:g}%',
            )
            if st.button('Remove deal', key=f'{key_prefix}_remove'):
                timeline.remove(int(index))
                actions['changed'] = True
                index = None

    with c3:
        if index is not None:
            deal = timeline.deals[index]
            revision = st.session_state.get(f'{key_prefix}_revision', 0)
            new_range = st.slider(
                'Drag selected deal (months)',
                min_value=0,
                max_value=timeline.term_months,
                value=(deal.start_month, deal.end_month),
                step=1,
                key=f'{key_prefix}_drag_{index}_{revision}',
            )
            start, end = int(new_range[0]), int(new_range[1])
            if (start, end) != (deal.start_month, deal.end_month):
                new_index = drag_deal_to_range(timeline, int(index), start, end)
                if new_index is None:
                    actions['rejected'].append('Drag would overlap another deal')
                    st.warning('Drag would overlap another deal')
                else:
                    st.session_state[f'{key_prefix}_selected_next'] = new_index
                    actions['changed'] = True

    if actions['changed'] or actions['rejected']:
        # A new editor key drops the stale row edits held by the widget.
        st.session_state[f'{key_prefix}_revision'] = st.session_state.get(f'{key_prefix}_revision', 0) + 1
    return actions
