import pytest

from mortgasim.data.validator import parse_form_payload, validate_deals, validate_form
from mortgasim.models.deal import Deal
from mortgasim.models.form import CustomOverpayment, MortgageFormData, SavingsAccount


def test_default_form_is_valid() -> None:
    assert validate_form(MortgageFormData(start_date='2025-01-01')) == []


def test_field_rules() -> None:
    form = MortgageFormData(
        start_date='not-a-date',
        mortgage_amount=500.0,
        term_years=45,
        variable_rate=16.0,
        max_payment_after_fixed=0.0,
        savings_accounts=(SavingsAccount(name='ISA', rate=-1.0, monthly_contribution=-5.0),),
        show_years_after_payoff=25,
        overpayment_type='weekly',
        regular_overpayment_months=400,
        custom_overpayments=(CustomOverpayment(month=13, year=2019, amount=-1.0),),
        deals=(),
    )
    errors = validate_form(form)
    expected = [
        'Please enter a valid date',
        'Mortgage amount must be at least 1,000',
        'Term cannot exceed 40 years',
        'Variable rate cannot exceed 15%',
        'Maximum payment must be positive',
        'Savings rate (ISA) cannot be negative',
        'Monthly contribution (ISA) cannot be negative',
        'Years after payoff must be between 0 and 20',
        'Duration must be between 1 and 300 months',
        'Month must be between 1-12',
        'Year must be at least 2020',
        'Amount cannot be negative',
    ]
    for message in expected:
        assert message in errors
    assert any(e.startswith('Overpayment type must be one of') for e in errors)


def test_deal_rules() -> None:
    form = MortgageFormData(term_years=2, deals=(Deal(0, 12, 1.5), Deal(6, 30, 2.0)))
    errors = validate_deals(form)
    assert 'Deal 6-30 is outside the 24-month term' in errors
    assert 'Deals 0-12 and 6-30 overlap' in errors


def test_parse_form_payload() -> None:
    form = parse_form_payload({'start_date': '2025-01-01', 'mortgage_amount': 150000, 'deals': [{'start_month': 12, 'end_month': 24, 'rate': 2.0}, {'start_month': 0, 'end_month': 12, 'rate': 1.0}]})
    assert form.mortgage_amount == 150000.0
    assert [d.start_month for d in form.deals] == [0, 12]

    with pytest.raises(ValueError, match='Malformed'):
        parse_form_payload({'deals': [{'start_month': 0}]})
    with pytest.raises(ValueError, match='Malformed'):
        parse_form_payload(['not', 'a', 'mapping'])
    with pytest.raises(ValueError, match='Invalid'):
        parse_form_payload({'start_date': '2025-01-01', 'term_years': 0})
