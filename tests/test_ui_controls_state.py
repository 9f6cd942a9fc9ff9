import pandas as pd

from mortgasim.dashboard.components.controls import (
    accounts_from_editor,
    accounts_to_editor,
    coerce_option,
    custom_overpayments_from_editor,
    custom_overpayments_to_editor,
)
from mortgasim.models.form import CustomOverpayment, SavingsAccount


def test_coerce_option_prefers_existing_value() -> None:
    options = ['none', 'regular', 'custom']
    assert coerce_option('regular', options, 'none') == 'regular'


def test_coerce_option_falls_back_to_default_then_first() -> None:
    options = ['none', 'regular', 'custom']
    assert coerce_option('weekly', options, 'custom') == 'custom'
    assert coerce_option('weekly', options, 'daily') == 'none'
    assert coerce_option('weekly', [], 'daily') == 'daily'


def test_accounts_editor_roundtrip_skips_incomplete_rows() -> None:
    accounts = [SavingsAccount(), SavingsAccount(name='ISA', rate=5.1, monthly_contribution=0.0, initial_balance=20000.0, draw_for_repayment=True)]
    df = accounts_to_editor(accounts)
    df.loc[len(df)] = ['', 3.0, 100.0, 0.0, False]
    df.loc[len(df)] = ['Broken', None, 100.0, 0.0, False]
    assert accounts_from_editor(df) == accounts


def test_accounts_editor_blank_amounts_become_zero() -> None:
    df = pd.DataFrame([['Pot', '2.5', None, '', False]], columns=accounts_to_editor([]).columns)
    assert accounts_from_editor(df) == [SavingsAccount(name='Pot', rate=2.5, monthly_contribution=0.0, initial_balance=0.0)]


def test_custom_overpayment_editor_drops_blank_rows() -> None:
    items = [CustomOverpayment(month=3, year=2026, amount=1000.0)]
    df = custom_overpayments_to_editor(items)
    df.loc[len(df)] = [None, 2027, 500.0]
    assert custom_overpayments_from_editor(df) == items
    assert custom_overpayments_from_editor(pd.DataFrame()) == []
