"""Mortgage form state shared by the dashboard, persistence and request assembly."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from typing import Any

from mortgasim.models.deal import Deal

OVERPAYMENT_TYPES = ('none', 'regular', 'custom')


def _today_iso() -> str:
    return date.today().isoformat()


@dataclass(frozen=True)
class SavingsAccount:
    name: str = 'Savings'
    rate: float = 4.3
    monthly_contribution: float = 2500.0
    initial_balance: float = 170000.0
    draw_for_repayment: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SavingsAccount:
        if not isinstance(raw, dict):
            raise TypeError(f'Savings account must be a mapping, got {type(raw).__name__}.')
        return cls(
            name=str(raw.get('name', 'Savings')),
            rate=float(raw.get('rate', 0.0)),
            monthly_contribution=float(raw.get('monthly_contribution', 0.0)),
            initial_balance=float(raw.get('initial_balance', 0.0)),
            draw_for_repayment=bool(raw.get('draw_for_repayment', False)),
        )


@dataclass(frozen=True)
class CustomOverpayment:
    """Calendar-addressed overpayment entered through the form (month is 1-12)."""

    month: int
    year: int
    amount: float

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CustomOverpayment:
        if not isinstance(raw, dict):
            raise TypeError(f'Custom overpayment must be a mapping, got {type(raw).__name__}.')
        return cls(month=int(raw['month']), year=int(raw['year']), amount=float(raw['amount']))


@dataclass(frozen=True)
class MortgageFormData:
    """All user inputs of the simulator page."""

    start_date: str = field(default_factory=_today_iso)
    mortgage_amount: float = 200000.0
    term_years: float = 25
    fixed_rate: float = 1.65
    fixed_term_months: int = 24
    variable_rate: float = 6.0
    max_payment_after_fixed: float | None = None
    savings_accounts: tuple[SavingsAccount, ...] = (SavingsAccount(),)
    typical_payment: float = 878.0
    asset_value: float = 360000.0
    show_years_after_payoff: int = 5
    overpayment_type: str = 'none'
    regular_overpayment_amount: float | None = None
    regular_overpayment_months: int | None = None
    custom_overpayments: tuple[CustomOverpayment, ...] = ()
    deals: tuple[Deal, ...] = (Deal(start_month=0, end_month=24, rate=1.65),)
    birth_year: int | None = None

    @property
    def term_months(self) -> int:
        return int(round(float(self.term_years) * 12))

    def with_fields(self, **changes) -> MortgageFormData:
        if 'deals' in changes:
            changes['deals'] = tuple(changes['deals'])
        if 'savings_accounts' in changes:
            changes['savings_accounts'] = tuple(changes['savings_accounts'])
        if 'custom_overpayments' in changes:
            changes['custom_overpayments'] = tuple(changes['custom_overpayments'])
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out['savings_accounts'] = [asdict(a) for a in self.savings_accounts]
        out['custom_overpayments'] = [asdict(c) for c in self.custom_overpayments]
        out['deals'] = [d.to_dict() for d in self.deals]
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MortgageFormData:
        """Build form state from a plain mapping; missing keys take defaults.

        Raises ``KeyError``/``TypeError``/``ValueError`` when values cannot be coerced.
        """
        if not isinstance(raw, dict):
            raise TypeError('Form data must be a mapping.')
        base = cls()
        values: dict[str, Any] = {}
        for key in ('start_date', 'overpayment_type'):
            if key in raw:
                values[key] = str(raw[key])
        for key in ('mortgage_amount', 'term_years', 'fixed_rate', 'variable_rate', 'typical_payment', 'asset_value'):
            if key in raw:
                values[key] = float(raw[key])
        for key in ('fixed_term_months', 'show_years_after_payoff'):
            if key in raw:
                values[key] = int(raw[key])
        for key in ('max_payment_after_fixed', 'regular_overpayment_amount'):
            if raw.get(key) is not None:
                values[key] = float(raw[key])
        for key in ('regular_overpayment_months', 'birth_year'):
            if raw.get(key) is not None:
                values[key] = int(raw[key])
        if 'savings_accounts' in raw:
            values['savings_accounts'] = tuple(SavingsAccount.from_dict(a) for a in raw['savings_accounts'])
        if 'custom_overpayments' in raw:
            values['custom_overpayments'] = tuple(CustomOverpayment.from_dict(c) for c in raw['custom_overpayments'])
        if 'deals' in raw:
            deals = [Deal.from_dict(d) for d in raw['deals']]
            values['deals'] = tuple(sorted(deals, key=lambda d: d.start_month))
        return replace(base, **values)
