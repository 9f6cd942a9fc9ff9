"""Shared UI controls and state normalization helpers."""

from __future__ import annotations

from typing import Any, Iterable

import pandas as pd
import streamlit as st

from mortgasim.models.deal import Deal
from mortgasim.models.form import OVERPAYMENT_TYPES, CustomOverpayment, MortgageFormData, SavingsAccount
from mortgasim.utils.date_utils import to_timestamp

OVERPAYMENT_TYPE_LABELS = {
    'none': 'None',
    'regular': 'Regular monthly',
    'custom': 'Custom schedule',
}
ACCOUNT_COLUMNS = ['Name', 'Rate (%)', 'Monthly Contribution', 'Initial Balance', 'Draw for Repayment']
CUSTOM_OVERPAYMENT_COLUMNS = ['Month', 'Year', 'Amount']


def coerce_option(current: Any, options: list[Any], default: Any) -> Any:
    """Return a stable option value that is guaranteed to be in options."""
    if not options:
        return default
    if current in options:
        return current
    if default in options:
        return default
    return options[0]


def _stable_radio(
    *,
    label: str,
    options: list[str],
    key: str,
    default: str,
    horizontal: bool = True,
    format_func=None,
) -> str:
    current = coerce_option(st.session_state.get(key, default), options, default)
    st.session_state[key] = current
    if format_func is None:
        return st.radio(label, options=options, horizontal=horizontal, key=key)
    return st.radio(label, options=options, horizontal=horizontal, key=key, format_func=format_func)


def stable_selectbox(
    *,
    label: str,
    options: list[Any],
    key: str,
    default: Any,
    format_func=None,
) -> Any:
    """Selectbox whose stored value is coerced into ``options`` before the widget is created."""
    if not options:
        return default
    current = coerce_option(st.session_state.get(key, default), options, default)
    st.session_state[key] = current
    if format_func is None:
        return st.selectbox(label, options, key=key)
    return st.selectbox(label, options, key=key, format_func=format_func)


def accounts_to_editor(accounts: Iterable[SavingsAccount]) -> pd.DataFrame:
    rows = [
        [a.name, a.rate, a.monthly_contribution, a.initial_balance, a.draw_for_repayment]
        for a in accounts
    ]
    return pd.DataFrame(rows, columns=ACCOUNT_COLUMNS)


def accounts_from_editor(df: pd.DataFrame) -> list[SavingsAccount]:
    """Rows with a blank name or a non-numeric rate are skipped; other blanks become 0."""
    accounts: list[SavingsAccount] = []
    if df is None or df.empty:
        return accounts
    for _, row in df.iterrows():
        name = str(row.get('Name') or '').strip()
        rate = pd.to_numeric(row.get('Rate (%)'), errors='coerce')
        if not name or pd.isna(rate):
            continue
        contribution = pd.to_numeric(row.get('Monthly Contribution'), errors='coerce')
        balance = pd.to_numeric(row.get('Initial Balance'), errors='coerce')
        accounts.append(
            SavingsAccount(
                name=name,
                rate=float(rate),
                monthly_contribution=0.0 if pd.isna(contribution) else float(contribution),
                initial_balance=0.0 if pd.isna(balance) else float(balance),
                draw_for_repayment=bool(row.get('Draw for Repayment', False)),
            )
        )
    return accounts


def custom_overpayments_to_editor(items: Iterable[CustomOverpayment]) -> pd.DataFrame:
    return pd.DataFrame([[c.month, c.year, c.amount] for c in items], columns=CUSTOM_OVERPAYMENT_COLUMNS)


def custom_overpayments_from_editor(df: pd.DataFrame) -> list[CustomOverpayment]:
    out: list[CustomOverpayment] = []
    if df is None or df.empty:
        return out
    work = df.copy()
    for col in CUSTOM_OVERPAYMENT_COLUMNS:
        if col not in work.columns:
            return out
        work[col] = pd.to_numeric(work[col], errors='coerce')
    work = work.dropna(subset=CUSTOM_OVERPAYMENT_COLUMNS)
    for _, row in work.iterrows():
        out.append(CustomOverpayment(month=int(row['Month']), year=int(row['Year']), amount=float(row['Amount'])))
    return out


def seed_form_widgets(form: MortgageFormData, *, force: bool = False) -> None:
    """Copy ``form`` into widget session keys, once per session unless ``force``."""
    if st.session_state.get('form_seeded') and not force:
        return
    st.session_state['form_start_date'] = to_timestamp(form.start_date).date()
    st.session_state['form_mortgage_amount'] = float(form.mortgage_amount)
    st.session_state['form_term_years'] = float(form.term_years)
    st.session_state['form_variable_rate'] = float(form.variable_rate)
    st.session_state['form_max_payment_after_fixed'] = float(form.max_payment_after_fixed or 0.0)
    st.session_state['form_typical_payment'] = float(form.typical_payment)
    st.session_state['form_asset_value'] = float(form.asset_value)
    st.session_state['form_show_years_after_payoff'] = int(form.show_years_after_payoff)
    st.session_state['form_overpayment_type'] = coerce_option(form.overpayment_type, list(OVERPAYMENT_TYPES), 'none')
    st.session_state['form_regular_amount'] = float(form.regular_overpayment_amount or 0.0)
    st.session_state['form_regular_months'] = int(form.regular_overpayment_months or 12)
    st.session_state['form_birth_year'] = int(form.birth_year or 0)
    st.session_state['form_accounts_data'] = accounts_to_editor(form.savings_accounts)
    st.session_state['form_custom_data'] = custom_overpayments_to_editor(form.custom_overpayments)
    st.session_state.pop('form_accounts_editor', None)
    st.session_state.pop('form_custom_editor', None)
    st.session_state['form_seeded'] = True


def render_form_controls(deals: Iterable[Deal], legacy_fields: dict[str, Any]) -> MortgageFormData:
    """Render the sidebar form and return the resulting (unvalidated) form state."""
    with st.sidebar:
        st.subheader('Mortgage')
        start_date = st.date_input('Start date', key='form_start_date')
        mortgage_amount = st.number_input('Mortgage amount (£)', min_value=0.0, step=5000.0, format='%.0f', key='form_mortgage_amount')
        term_years = st.number_input('Term (years)', min_value=1.0, max_value=40.0, step=1.0, format='%.0f', key='form_term_years')
        variable_rate = st.number_input(
            'Variable rate (%)',
            min_value=0.0,
            max_value=15.0,
            step=0.05,
            format='%.2f',
            key='form_variable_rate',
            help='Standard variable rate charged whenever no deal covers a month.',
        )
        max_payment = st.number_input(
            'Max payment after fixed (£, 0 = none)',
            min_value=0.0,
            step=50.0,
            format='%.0f',
            key='form_max_payment_after_fixed',
        )

        st.subheader('Savings')
        accounts_df = st.data_editor(
            st.session_state.get('form_accounts_data', accounts_to_editor([SavingsAccount()])),
            num_rows='dynamic',
            use_container_width=True,
            hide_index=True,
            key='form_accounts_editor',
        )

        st.subheader('Simulation')
        typical_payment = st.number_input('Typical payment (£)', min_value=0.0, step=10.0, format='%.0f', key='form_typical_payment')
        asset_value = st.number_input('Property value (£)', min_value=0.0, step=5000.0, format='%.0f', key='form_asset_value')
        years_after = st.number_input('Years after payoff', min_value=0, max_value=20, step=1, key='form_show_years_after_payoff')
        birth_year = st.number_input('Birth year (0 = hide ages)', min_value=0, max_value=2100, step=1, key='form_birth_year')

        st.subheader('Form overpayments')
        overpayment_type = _stable_radio(
            label='Overpayment type',
            options=list(OVERPAYMENT_TYPES),
            key='form_overpayment_type',
            default='none',
            horizontal=False,
            format_func=lambda v: OVERPAYMENT_TYPE_LABELS.get(v, v),
        )
        regular_amount: float | None = None
        regular_months: int | None = None
        custom: list[CustomOverpayment] = []
        if overpayment_type == 'regular':
            regular_amount = float(st.number_input('Monthly amount (£)', min_value=0.0, step=50.0, key='form_regular_amount'))
            regular_months = int(st.number_input('For months', min_value=1, max_value=300, step=1, key='form_regular_months'))
        elif overpayment_type == 'custom':
            custom_df = st.data_editor(
                st.session_state.get('form_custom_data', custom_overpayments_to_editor([])),
                num_rows='dynamic',
                use_container_width=True,
                hide_index=True,
                key='form_custom_editor',
            )
            custom = custom_overpayments_from_editor(custom_df)

    return MortgageFormData(
        start_date=pd.Timestamp(start_date).date().isoformat(),
        mortgage_amount=float(mortgage_amount),
        term_years=float(term_years),
        fixed_rate=float(legacy_fields['fixed_rate']),
        fixed_term_months=int(legacy_fields['fixed_term_months']),
        variable_rate=float(variable_rate),
        max_payment_after_fixed=float(max_payment) if max_payment > 0 else None,
        savings_accounts=tuple(accounts_from_editor(accounts_df)),
        typical_payment=float(typical_payment),
        asset_value=float(asset_value),
        show_years_after_payoff=int(years_after),
        overpayment_type=overpayment_type,
        regular_overpayment_amount=regular_amount,
        regular_overpayment_months=regular_months,
        custom_overpayments=tuple(custom),
        deals=tuple(deals),
        birth_year=int(birth_year) or None,
    )
