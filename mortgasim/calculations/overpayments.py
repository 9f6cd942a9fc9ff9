"""Overpayment marker state for the interactive balance chart."""

from __future__ import annotations

from typing import Any, Callable, Iterable
from uuid import uuid4

import numpy as np

from mortgasim.models.overpayment import OverpaymentMarker
from mortgasim.utils.date_utils import period_label
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

UPDATABLE_FIELDS = ('period_index', 'amount')


def _new_marker_id() -> str:
    return f'op-{uuid4().hex[:12]}'


def format_api_number(value: float) -> str:
    """Plain positional numeral, never scientific: ``5000``, ``99.99``, ``0.00005``."""
    return np.format_float_positional(float(value), trim='-')


def parse_api_string(value: str | None) -> list[tuple[int, float]]:
    """Parse ``"month:amount,month:amount"`` into ``(period_index, amount)`` pairs.

    Raises ``ValueError`` for malformed entries.
    """
    if not value:
        return []
    pairs: list[tuple[int, float]] = []
    for item in value.split(','):
        month_str, sep, amount_str = item.partition(':')
        if not sep:
            raise ValueError(f'Invalid overpayment entry: {item!r}')
        pairs.append((int(month_str), float(amount_str)))
    return pairs


class OverpaymentStore:
    """Explicitly owned container of period-indexed overpayment markers.

    At most one marker exists per ``period_index``; :meth:`add` at an occupied
    index updates that marker's amount instead.
    """

    def __init__(
        self,
        start_date: str | None = None,
        *,
        id_factory: Callable[[], str] = _new_marker_id,
    ) -> None:
        self._markers: list[OverpaymentMarker] = []
        self._start_date: str | None = start_date
        self._id_factory = id_factory
        self.editing_id: str | None = None

    @property
    def markers(self) -> tuple[OverpaymentMarker, ...]:
        return tuple(self._markers)

    @property
    def start_date(self) -> str | None:
        return self._start_date

    def __len__(self) -> int:
        return len(self._markers)

    def _label(self, period_index: int) -> str:
        if not self._start_date:
            return ''
        return period_label(period_index, self._start_date)

    def _sort(self) -> None:
        self._markers.sort(key=lambda m: m.period_index)

    def set_start_date(self, start_date: str) -> None:
        self._start_date = start_date
        self._markers = [m.with_fields(date_label=self._label(m.period_index)) for m in self._markers]

    def get(self, marker_id: str) -> OverpaymentMarker | None:
        return next((m for m in self._markers if m.id == marker_id), None)

    def get_at_period(self, period_index: int) -> OverpaymentMarker | None:
        return next((m for m in self._markers if m.period_index == int(period_index)), None)

    def add(self, period_index: int, amount: float) -> OverpaymentMarker | None:
        """Create a marker, or update the amount of the one already at ``period_index``."""
        if not self._start_date:
            LOGGER.warning('Cannot add overpayment: start date not set')
            return None
        if int(period_index) < 1 or float(amount) < 0:
            LOGGER.debug('Rejected overpayment at period %s amount %s', period_index, amount)
            return None
        existing = self.get_at_period(period_index)
        if existing is not None:
            updated = existing.with_fields(amount=float(amount))
            self._markers = [updated if m.id == existing.id else m for m in self._markers]
            self.editing_id = existing.id
            return updated
        marker = OverpaymentMarker(
            id=self._id_factory(),
            period_index=int(period_index),
            amount=float(amount),
            date_label=self._label(period_index),
        )
        self._markers.append(marker)
        self._sort()
        self.editing_id = marker.id
        return marker

    def update(self, marker_id: str, **changes: Any) -> OverpaymentMarker | None:
        """Merge ``period_index`` and/or ``amount`` into a marker.

        Moving onto an index held by another marker is rejected so the
        one-marker-per-period rule holds during drags too.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f'Unknown overpayment fields: {sorted(unknown)}')
        marker = self.get(marker_id)
        if marker is None:
            return None
        fields: dict[str, Any] = {}
        if 'amount' in changes:
            if float(changes['amount']) < 0:
                return None
            fields['amount'] = float(changes['amount'])
        if 'period_index' in changes:
            period_index = int(changes['period_index'])
            if period_index < 1:
                return None
            occupant = self.get_at_period(period_index)
            if occupant is not None and occupant.id != marker_id:
                LOGGER.debug('Rejected move of %s onto occupied period %s', marker_id, period_index)
                return None
            fields['period_index'] = period_index
            fields['date_label'] = self._label(period_index)
        updated = marker.with_fields(**fields)
        self._markers = [updated if m.id == marker_id else m for m in self._markers]
        self._sort()
        return updated

    def remove(self, marker_id: str) -> None:
        self._markers = [m for m in self._markers if m.id != marker_id]
        if self.editing_id == marker_id:
            self.editing_id = None

    def set_editing_id(self, marker_id: str | None) -> None:
        self.editing_id = marker_id

    def set_dragging(self, marker_id: str, is_dragging: bool) -> None:
        self._markers = [
            m.with_fields(is_dragging=bool(is_dragging)) if m.id == marker_id else m
            for m in self._markers
        ]

    def clear_all(self) -> None:
        self._markers = []
        self.editing_id = None

    def to_api_string(self) -> str | None:
        """``"month:amount,..."`` for markers with a positive amount, or ``None``."""
        positive = [m for m in self._markers if m.amount > 0]
        if not positive:
            return None
        return ','.join(f'{m.period_index}:{format_api_number(m.amount)}' for m in positive)

    def to_snapshot(self) -> dict[str, Any]:
        return {
            'chart_overpayments': [m.to_dict() for m in self._markers],
            'start_date': self._start_date,
        }

    @classmethod
    def from_snapshot(
        cls,
        snapshot: dict[str, Any],
        *,
        id_factory: Callable[[], str] = _new_marker_id,
    ) -> OverpaymentStore:
        store = cls(snapshot.get('start_date'), id_factory=id_factory)
        seen: set[int] = set()
        for raw in snapshot.get('chart_overpayments', []):
            marker = OverpaymentMarker.from_dict(raw)
            if marker.period_index in seen:
                continue
            seen.add(marker.period_index)
            store._markers.append(marker.with_fields(date_label=store._label(marker.period_index)))
        store._sort()
        return store

    @classmethod
    def from_pairs(cls, start_date: str, pairs: Iterable[tuple[int, float]]) -> OverpaymentStore:
        store = cls(start_date)
        for period_index, amount in pairs:
            store.add(period_index, amount)
        store.editing_id = None
        return store
