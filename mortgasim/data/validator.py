"""Input validation for mortgage form state."""

from __future__ import annotations

from typing import Any

import pandas as pd

from mortgasim.models.deal import MAX_RATE, MIN_RATE
from mortgasim.models.form import OVERPAYMENT_TYPES, MortgageFormData

MIN_MORTGAGE_AMOUNT = 1000.0
MAX_TERM_YEARS = 40
MAX_YEARS_AFTER_PAYOFF = 20
MAX_REGULAR_OVERPAYMENT_MONTHS = 300
MIN_OVERPAYMENT_YEAR = 2020


def _rate_errors(name: str, value: float) -> list[str]:
    if value < MIN_RATE:
        return [f'{name} cannot be negative']
    if value > MAX_RATE:
        return [f'{name} cannot exceed {MAX_RATE:g}%']
    return []


def validate_form(form: MortgageFormData) -> list[str]:
    """Return human-readable errors; an empty list means the form is valid."""
    errors: list[str] = []

    start = pd.to_datetime(form.start_date, errors='coerce')
    if not form.start_date:
        errors.append('Start date is required')
    elif pd.isna(start):
        errors.append('Please enter a valid date')

    if form.mortgage_amount < MIN_MORTGAGE_AMOUNT:
        errors.append('Mortgage amount must be at least 1,000')
    if form.term_years < 1:
        errors.append('Term must be at least 1 year')
    elif form.term_years > MAX_TERM_YEARS:
        errors.append(f'Term cannot exceed {MAX_TERM_YEARS} years')

    errors += _rate_errors('Fixed rate', form.fixed_rate)
    errors += _rate_errors('Variable rate', form.variable_rate)
    if form.fixed_term_months < 0:
        errors.append('Fixed term cannot be negative')
    if form.max_payment_after_fixed is not None and form.max_payment_after_fixed <= 0:
        errors.append('Maximum payment must be positive')

    for account in form.savings_accounts:
        errors += _rate_errors(f'Savings rate ({account.name})', account.rate)
        if account.monthly_contribution < 0:
            errors.append(f'Monthly contribution ({account.name}) cannot be negative')
        if account.initial_balance < 0:
            errors.append(f'Initial balance ({account.name}) cannot be negative')

    if form.typical_payment < 0:
        errors.append('Typical payment cannot be negative')
    if form.asset_value < 0:
        errors.append('Asset value cannot be negative')
    if not 0 <= form.show_years_after_payoff <= MAX_YEARS_AFTER_PAYOFF:
        errors.append(f'Years after payoff must be between 0 and {MAX_YEARS_AFTER_PAYOFF}')

    if form.overpayment_type not in OVERPAYMENT_TYPES:
        errors.append(f'Overpayment type must be one of {", ".join(OVERPAYMENT_TYPES)}')
    if form.regular_overpayment_amount is not None and form.regular_overpayment_amount < 0:
        errors.append('Overpayment amount cannot be negative')
    if form.regular_overpayment_months is not None and not (
        1 <= form.regular_overpayment_months <= MAX_REGULAR_OVERPAYMENT_MONTHS
    ):
        errors.append(f'Duration must be between 1 and {MAX_REGULAR_OVERPAYMENT_MONTHS} months')
    for op in form.custom_overpayments:
        if not 1 <= op.month <= 12:
            errors.append('Month must be between 1-12')
        if op.year < MIN_OVERPAYMENT_YEAR:
            errors.append(f'Year must be at least {MIN_OVERPAYMENT_YEAR}')
        if op.amount < 0:
            errors.append('Amount cannot be negative')

    errors += validate_deals(form)
    return errors


def validate_deals(form: MortgageFormData) -> list[str]:
    """Bounds and non-overlap checks for the deal collection against the form's term."""
    errors: list[str] = []
    term = form.term_months
    deals = sorted(form.deals, key=lambda d: d.start_month)
    for deal in deals:
        if not 0 <= deal.start_month < deal.end_month <= term:
            errors.append(f'Deal {deal.start_month}-{deal.end_month} is outside the {term}-month term')
        errors += _rate_errors('Deal rate', deal.rate)
    for prev, nxt in zip(deals, deals[1:]):
        if prev.overlaps(nxt):
            errors.append(f'Deals {prev.start_month}-{prev.end_month} and {nxt.start_month}-{nxt.end_month} overlap')
    return errors


def parse_form_payload(raw: Any) -> MortgageFormData:
    """Coerce and validate a stored/shared payload; raises ``ValueError`` on failure."""
    try:
        form = MortgageFormData.from_dict(raw)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f'Malformed form payload: {exc}') from exc
    errors = validate_form(form)
    if errors:
        raise ValueError(f'Invalid form payload: {"; ".join(errors)}')
    return form
