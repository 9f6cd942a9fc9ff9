"""Overpayment marker domain model."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class OverpaymentMarker:
    """One lump-sum overpayment placed on the balance chart.

    ``period_index`` is 1-based (month 1 is the simulation start month).
    ``is_dragging`` is transient UI state and never persisted.
    """

    id: str
    period_index: int
    amount: float
    date_label: str = ''
    is_dragging: bool = False

    def with_fields(self, **changes) -> OverpaymentMarker:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'period_index': int(self.period_index),
            'amount': float(self.amount),
            'date_label': self.date_label,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> OverpaymentMarker:
        if not isinstance(raw, dict):
            raise TypeError(f'Overpayment marker must be a mapping, got {type(raw).__name__}.')
        return cls(
            id=str(raw['id']),
            period_index=int(raw['period_index']),
            amount=float(raw['amount']),
            date_label=str(raw.get('date_label', '')),
        )
