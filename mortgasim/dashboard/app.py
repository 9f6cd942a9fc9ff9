"""Streamlit app entrypoint for the mortgage and savings simulator."""

from __future__ import annotations

from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd
import streamlit as st

from mortgasim.calculations.deal_timeline import DealTimeline
from mortgasim.calculations.overpayments import OverpaymentStore, parse_api_string
from mortgasim.dashboard.components.controls import render_form_controls, seed_form_widgets, stable_selectbox
from mortgasim.dashboard.components.deal_editor import render_deal_editor
from mortgasim.dashboard.components.formatting import style_numeric_table
from mortgasim.dashboard.components.overpayment_popover import POPOVER_KEY, render_overpayment_panel
from mortgasim.dashboard.components.summary_cards import render_summary_cards
from mortgasim.dashboard.plots.projection_plots import (
    build_ltv_figure,
    build_net_worth_figure,
    build_payment_schedule_figure,
    build_savings_flow_figure,
    chart_frame,
)
from mortgasim.dashboard.share_link import (
    form_from_query_params,
    form_from_slug,
    generate_mortgage_slug,
    generate_share_link,
)
from mortgasim.dashboard.state_store import (
    FORM_STORE_FILENAME,
    OVERPAYMENT_STORE_FILENAME,
    clear_store,
    load_form_store,
    load_overpayment_store,
    save_form_store,
    save_overpayment_store,
)
from mortgasim.data.validator import validate_form
from mortgasim.models.form import MortgageFormData
from mortgasim.services.debounced_simulation import DebouncedSimulation
from mortgasim.services.mortgage_api import SCHEDULE_TYPES, MortgageApiClient, MortgageApiError
from mortgasim.services.simulation_request import build_simulation_request, derive_legacy_fields
from mortgasim.utils.config import AppConfig, load_config
from mortgasim.utils.logging import get_logger, setup_logging
from mortgasim.utils.scheduling import ThreadingScheduler

LOGGER = get_logger(__name__)

SLUG_PARAM = 'mortgage'


@st.cache_resource
def _config() -> AppConfig:
    config = load_config()
    setup_logging(config.log_level)
    LOGGER.info('Simulation API at %s (%s)', config.api_base_url, config.environment)
    return config


@st.cache_resource
def _client(api_base_url: str, timeout: float) -> MortgageApiClient:
    return MortgageApiClient(api_base_url, timeout=timeout)


@st.cache_data(ttl=300, show_spinner=False)
def _api_status(api_base_url: str, timeout: float) -> str:
    try:
        payload = _client(api_base_url, timeout).health_check()
    except MortgageApiError as exc:
        return f'Unavailable: {exc}'
    return str(payload.get('status', 'ok')) if isinstance(payload, dict) else 'ok'


def _initial_form(config: AppConfig) -> tuple[MortgageFormData, str]:
    """Share link beats URL slug beats saved form beats defaults."""
    params = st.query_params.to_dict()
    shared = form_from_query_params(params)
    if shared is not None:
        return shared, 'shared link'
    slug = params.get(SLUG_PARAM)
    if slug:
        from_slug = form_from_slug(str(slug))
        if from_slug is not None:
            return from_slug, 'URL'
    saved = load_form_store(config.state_dir / FORM_STORE_FILENAME)
    if saved is not None:
        return saved, 'saved session'
    return MortgageFormData(), 'defaults'


def _bootstrap(config: AppConfig) -> None:
    if st.session_state.get('app_bootstrapped'):
        return
    form, source = _initial_form(config)
    LOGGER.info('Loaded form from %s', source)
    seed_form_widgets(form, force=True)
    st.session_state['deal_timeline'] = DealTimeline(form.deals, form.term_months)
    store = load_overpayment_store(config.state_dir / OVERPAYMENT_STORE_FILENAME)
    store.set_start_date(form.start_date)
    st.session_state['overpayment_store'] = store
    client = _client(config.api_base_url, config.api_timeout)
    st.session_state['simulation'] = DebouncedSimulation(client.simulate, ThreadingScheduler())
    st.session_state['form_source'] = source
    st.session_state['app_bootstrapped'] = True


def _reset(config: AppConfig) -> None:
    clear_store(config.state_dir / FORM_STORE_FILENAME)
    clear_store(config.state_dir / OVERPAYMENT_STORE_FILENAME)
    st.query_params.clear()
    for key in list(st.session_state.keys()):
        del st.session_state[key]


def _render_share_controls(form: MortgageFormData, config: AppConfig) -> None:
    with st.sidebar:
        st.subheader('Share')
        if st.button('Create share link', key='share_create'):
            try:
                link = generate_share_link(form, config.share_base_url)
            except (TypeError, ValueError) as exc:
                LOGGER.warning('Share link generation failed: %s', exc)
                st.toast('Could not create share link')
            else:
                st.session_state['share_link'] = link
                st.toast('Share link ready')
        if st.session_state.get('share_link'):
            st.code(st.session_state['share_link'], language=None)
            slug = generate_mortgage_slug(form.mortgage_amount, int(form.term_years), form.deals[0].rate if form.deals else form.variable_rate)
            st.caption(f'Short URL: ?{SLUG_PARAM}={slug}')


def _render_schedule_template(store: OverpaymentStore, client: MortgageApiClient, form: MortgageFormData) -> bool:
    """Fill the chart overpayments from an API-generated schedule template."""
    changed = False
    with st.sidebar.expander('Overpayment schedule template'):
        schedule_type = stable_selectbox(
            label='Schedule type',
            options=[t for t in SCHEDULE_TYPES if t != 'none'],
            key='schedule_type',
            default='fixed',
        )
        monthly_amount = bonus_month = bonus_amount = None
        lump_sums = None
        if schedule_type == 'fixed':
            monthly_amount = float(st.number_input('Monthly amount (£)', min_value=0.0, value=100.0, step=50.0, key='schedule_monthly'))
        elif schedule_type == 'yearly_bonus':
            bonus_month = int(st.number_input('Bonus month (1-12)', min_value=1, max_value=12, value=12, key='schedule_bonus_month'))
            bonus_amount = float(st.number_input('Bonus amount (£)', min_value=0.0, value=5000.0, step=500.0, key='schedule_bonus_amount'))
        else:
            lump_sums = st.text_input('Lump sums (month:amount,...)', value='', key='schedule_lump_sums').strip() or None
        if st.button('Apply to chart', key='schedule_apply'):
            try:
                schedule = client.create_overpayment_schedule(
                    form.term_months,
                    schedule_type,
                    monthly_amount=monthly_amount,
                    bonus_month=bonus_month,
                    bonus_amount=bonus_amount,
                    lump_sums=lump_sums,
                )
                pairs = parse_api_string(schedule)
            except (MortgageApiError, ValueError) as exc:
                st.error(str(exc))
            else:
                store.clear_all()
                for period_index, amount in pairs:
                    if period_index <= form.term_months:
                        store.add(period_index, amount)
                store.set_editing_id(None)
                st.toast(f'Applied {len(store)} overpayments')
                changed = True
    return changed


def _render_csv_download(client: MortgageApiClient, request: dict) -> None:
    if st.button('Prepare CSV export', key='csv_prepare'):
        try:
            st.session_state['csv_bytes'] = client.export_csv(request)
        except MortgageApiError as exc:
            st.error(f'CSV export failed: {exc}')
    if st.session_state.get('csv_bytes') is not None:
        st.download_button(
            label='Download CSV',
            data=st.session_state['csv_bytes'],
            file_name='mortgage_simulation.csv',
            mime='text/csv',
            key='csv_download',
        )


def main() -> None:
    st.set_page_config(page_title='Mortgage Simulator', layout='wide')
    st.title('Mortgage & Savings Simulator')

    config = _config()
    _bootstrap(config)
    timeline: DealTimeline = st.session_state['deal_timeline']
    store: OverpaymentStore = st.session_state['overpayment_store']
    simulation: DebouncedSimulation = st.session_state['simulation']
    client = _client(config.api_base_url, config.api_timeout)

    form = render_form_controls(timeline.deals, derive_legacy_fields(timeline.deals))
    if form.term_months != timeline.term_months:
        timeline.set_term_months(form.term_months)
    if store.start_date != form.start_date:
        store.set_start_date(form.start_date)

    with st.sidebar:
        st.caption(f'Loaded from {st.session_state.get("form_source", "defaults")} · API {_api_status(config.api_base_url, config.api_timeout)}')
        if st.button('Reset to defaults', key='app_reset'):
            _reset(config)
            st.rerun()

    deal_actions = render_deal_editor(timeline, form.variable_rate)
    if deal_actions['changed']:
        st.rerun()
    form = form.with_fields(deals=timeline.deals, **derive_legacy_fields(timeline.deals))

    if _render_schedule_template(store, client, form):
        save_overpayment_store(config.state_dir / OVERPAYMENT_STORE_FILENAME, store)
        st.session_state.pop(POPOVER_KEY, None)
        st.rerun()
    _render_share_controls(form, config)

    errors = validate_form(form)
    if errors:
        st.error('Please fix the form:\n\n' + '\n'.join(f'- {e}' for e in errors))
    else:
        save_form_store(config.state_dir / FORM_STORE_FILENAME, form)
        request = build_simulation_request(form, store.to_api_string())
        if request != simulation.last_request:
            st.session_state.pop('csv_bytes', None)
            with st.spinner('Running simulation...'):
                simulation.submit(request)

    if simulation.error is not None:
        st.error(str(simulation.error))

    results = simulation.data
    if not results:
        st.info('Simulation results will appear here once the API responds.')
        return

    start_date = str((simulation.last_request or {}).get('simulation', {}).get('start_date') or form.start_date)
    frame = chart_frame(results.get('chart_data') or {}, start_date)
    render_summary_cards(results.get('summary_statistics') or {}, start_date, results.get('warnings'))

    panel = render_overpayment_panel(store, frame, form.start_date, form.term_months, birth_year=form.birth_year)
    if panel['changed']:
        save_overpayment_store(config.state_dir / OVERPAYMENT_STORE_FILENAME, store)
        st.rerun()

    net_worth_tab, payments_tab, savings_tab, ltv_tab, table_tab = st.tabs(
        ['Net Worth', 'Payments', 'Savings', 'Loan to Value', 'Monthly Data']
    )
    with net_worth_tab:
        st.plotly_chart(build_net_worth_figure(frame), use_container_width=True)
    with payments_tab:
        st.plotly_chart(build_payment_schedule_figure(frame), use_container_width=True)
    with savings_tab:
        st.plotly_chart(build_savings_flow_figure(frame), use_container_width=True)
    with ltv_tab:
        st.plotly_chart(
            build_ltv_figure(frame, form.asset_value, start_date=start_date, birth_year=form.birth_year),
            use_container_width=True,
        )
    with table_tab:
        monthly = pd.DataFrame(results.get('monthly_data') or [])
        st.dataframe(style_numeric_table(monthly), use_container_width=True)
        if simulation.last_request is not None:
            _render_csv_download(client, simulation.last_request)


if __name__ == '__main__':
    main()
