"""Assemble the external simulation API request body from form state."""

from __future__ import annotations

from typing import Any, Iterable

from mortgasim.calculations.overpayments import format_api_number
from mortgasim.models.deal import Deal
from mortgasim.models.form import MortgageFormData
from mortgasim.utils.date_utils import month_year_to_period_index


def derive_legacy_fields(deals: Iterable[Deal]) -> dict[str, float | int]:
    """``fixed_rate``/``fixed_term_months`` from the earliest-starting deal, zeros when empty."""
    ordered = sorted(deals, key=lambda d: d.start_month)
    if not ordered:
        return {'fixed_rate': 0.0, 'fixed_term_months': 0}
    first = ordered[0]
    return {'fixed_rate': float(first.rate), 'fixed_term_months': int(first.end_month)}


def form_overpayments_to_api_string(form: MortgageFormData) -> str | None:
    """Overpayments entered through the form (regular or custom) as ``month:amount,...``."""
    if form.overpayment_type == 'regular':
        amount = form.regular_overpayment_amount
        months = form.regular_overpayment_months
        if not amount or not months:
            return None
        value = format_api_number(amount)
        return ','.join(f'{i}:{value}' for i in range(1, int(months) + 1))

    if form.overpayment_type == 'custom':
        valid = [
            op for op in form.custom_overpayments
            if 1 <= op.month <= 12 and op.year >= 2020 and op.amount > 0
        ]
        if not valid:
            return None
        converted = sorted(
            (month_year_to_period_index(op.month, op.year, form.start_date), op.amount)
            for op in valid
        )
        return ','.join(f'{period}:{format_api_number(amount)}' for period, amount in converted)

    return None


def build_simulation_request(
    form: MortgageFormData,
    chart_overpayments: str | None = None,
) -> dict[str, Any]:
    """Return the ``POST /simulate`` body.

    ``chart_overpayments`` (from the marker store) replaces form-derived
    overpayments when present.
    """
    deals = sorted(form.deals, key=lambda d: d.start_month)
    mortgage: dict[str, Any] = {
        'amount': float(form.mortgage_amount),
        'term_years': form.term_years,
        **derive_legacy_fields(deals),
        'variable_rate': float(form.variable_rate),
    }
    if form.max_payment_after_fixed is not None:
        mortgage['max_payment_after_fixed'] = float(form.max_payment_after_fixed)
    if deals:
        mortgage['deals'] = [d.to_dict() for d in deals]

    overpayments = chart_overpayments or form_overpayments_to_api_string(form)
    return {
        'mortgage': mortgage,
        'savings': {
            'accounts': [
                {
                    'name': acc.name,
                    'rate': float(acc.rate),
                    'monthly_contribution': float(acc.monthly_contribution),
                    'initial_balance': float(acc.initial_balance),
                    'draw_for_repayment': bool(acc.draw_for_repayment),
                }
                for acc in form.savings_accounts
            ],
        },
        'simulation': {
            'typical_payment': float(form.typical_payment),
            'asset_value': float(form.asset_value),
            'show_years_after_payoff': int(form.show_years_after_payoff),
            'overpayments': overpayments or None,
            'start_date': form.start_date,
        },
    }
