"""Deal timeline state: non-overlapping fixed-rate deals over the mortgage term.

Every mutating operation validates the candidate deal against the bounds
``0 <= start_month < end_month <= term_months`` and the half-open overlap test
before committing it. Invalid edits are rejected by returning ``False`` and
leaving the collection untouched; nothing here raises for user input.
"""

from __future__ import annotations

from typing import Iterable

from mortgasim.models.deal import MAX_RATE, MIN_RATE, Deal
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_NEW_DEAL_MONTHS = 24
EDITABLE_FIELDS = ('start_month', 'end_month', 'rate')


def _sorted(deals: Iterable[Deal]) -> list[Deal]:
    return sorted(deals, key=lambda d: (d.start_month, d.end_month))


def find_first_gap(
    deals: Iterable[Deal],
    term_months: int,
    max_span: int = DEFAULT_NEW_DEAL_MONTHS,
) -> tuple[int, int] | None:
    """Return ``(start, end)`` of the proposed span inside the first uncovered gap.

    The span starts at the gap start and is clipped to ``max_span`` months.
    Returns ``None`` when deals cover the full horizon.
    """
    cursor = 0
    for deal in _sorted(deals):
        if deal.start_month > cursor:
            return cursor, min(deal.start_month, cursor + max_span)
        cursor = max(cursor, deal.end_month)
    if cursor < term_months:
        return cursor, min(term_months, cursor + max_span)
    return None


def variable_rate_zones(deals: Iterable[Deal], term_months: int) -> list[tuple[int, int]]:
    """Complement of the deal collection over ``[0, term_months)``."""
    zones: list[tuple[int, int]] = []
    cursor = 0
    for deal in _sorted(deals):
        if deal.start_month > cursor:
            zones.append((cursor, min(deal.start_month, term_months)))
        cursor = max(cursor, deal.end_month)
    if cursor < term_months:
        zones.append((cursor, term_months))
    return zones


class DealTimeline:
    """Owns a sorted, non-overlapping deal collection bounded by the term.

    Deals are addressed by their position in :attr:`deals`. A successful
    edit re-sorts the collection, so a deal moved past a neighbour changes
    position; :meth:`place` returns where it landed.
    """

    def __init__(self, deals: Iterable[Deal] = (), term_months: int = 300) -> None:
        self._term_months = int(term_months)
        self._deals: list[Deal] = []
        for deal in _sorted(deals):
            if self._is_valid(deal, exclude_index=None):
                self._deals.append(deal)
            else:
                LOGGER.warning('Dropping invalid deal on load: %s', deal)

    @property
    def deals(self) -> tuple[Deal, ...]:
        return tuple(self._deals)

    @property
    def term_months(self) -> int:
        return self._term_months

    def __len__(self) -> int:
        return len(self._deals)

    def would_overlap(self, candidate: Deal, exclude_index: int | None = None) -> bool:
        return any(
            candidate.overlaps(deal)
            for i, deal in enumerate(self._deals)
            if i != exclude_index
        )

    def _in_bounds(self, deal: Deal) -> bool:
        if not MIN_RATE <= deal.rate <= MAX_RATE:
            return False
        return 0 <= deal.start_month < deal.end_month <= self._term_months

    def _is_valid(self, candidate: Deal, exclude_index: int | None) -> bool:
        return self._in_bounds(candidate) and not self.would_overlap(candidate, exclude_index)

    def _check_index(self, index: int) -> bool:
        return 0 <= index < len(self._deals)

    def place(self, index: int, candidate: Deal) -> int | None:
        """Replace the deal at ``index`` if the candidate is valid.

        Returns the candidate's index in the re-sorted collection, or ``None``
        when the edit is rejected.
        """
        if not self._check_index(index):
            return None
        if not self._is_valid(candidate, exclude_index=index):
            LOGGER.debug('Rejected deal edit at index %s: %s', index, candidate)
            return None
        self._deals[index] = candidate
        self._deals = _sorted(self._deals)
        return self._deals.index(candidate)

    def index_of(self, deal: Deal) -> int | None:
        try:
            return self._deals.index(deal)
        except ValueError:
            return None

    def moved(self, base: Deal, delta_months: int) -> Deal:
        """``base`` shifted by ``delta_months`` with its duration kept and clamped to the term."""
        duration = base.duration
        new_start = max(0, base.start_month + int(delta_months))
        new_end = min(self._term_months, new_start + duration)
        new_start = max(0, new_end - duration)
        return base.with_fields(start_month=new_start, end_month=new_end)

    def resized_start(self, base: Deal, new_start_month: int) -> Deal:
        return base.with_fields(start_month=max(0, min(base.end_month - 1, int(new_start_month))))

    def resized_end(self, base: Deal, new_end_month: int) -> Deal:
        return base.with_fields(end_month=min(self._term_months, max(base.start_month + 1, int(new_end_month))))

    def find_first_gap(self) -> tuple[int, int] | None:
        return find_first_gap(self._deals, self._term_months)

    def can_add(self) -> bool:
        return self.find_first_gap() is not None

    def add(self, rate: float) -> Deal | None:
        """Insert a deal in the first gap; returns it, or ``None`` when the timeline is full."""
        gap = self.find_first_gap()
        if gap is None:
            return None
        deal = Deal(start_month=gap[0], end_month=gap[1], rate=float(rate))
        if not self._in_bounds(deal):
            LOGGER.debug('Rejected new deal with rate %s', rate)
            return None
        self._deals = _sorted([*self._deals, deal])
        return deal

    def remove(self, index: int) -> Deal | None:
        if not self._check_index(index):
            return None
        return self._deals.pop(index)

    def move(self, index: int, delta_months: int, *, origin: Deal | None = None) -> bool:
        """Shift a deal by ``delta_months`` keeping its duration.

        ``origin`` lets a drag session apply the total displacement to the
        deal as it was when the drag started instead of the live value.
        """
        if not self._check_index(index):
            return False
        base = origin if origin is not None else self._deals[index]
        return self.place(index, self.moved(base, delta_months)) is not None

    def resize_start(self, index: int, new_start_month: int, *, origin: Deal | None = None) -> bool:
        if not self._check_index(index):
            return False
        base = origin if origin is not None else self._deals[index]
        return self.place(index, self.resized_start(base, new_start_month)) is not None

    def resize_end(self, index: int, new_end_month: int, *, origin: Deal | None = None) -> bool:
        if not self._check_index(index):
            return False
        base = origin if origin is not None else self._deals[index]
        return self.place(index, self.resized_end(base, new_end_month)) is not None

    def edit_field(self, index: int, field: str, value: float) -> bool:
        """Direct numeric edit from the companion list; no clamping, all-or-nothing."""
        if field not in EDITABLE_FIELDS:
            raise ValueError(f'Unknown deal field: {field}')
        if not self._check_index(index):
            return False
        if field == 'rate':
            candidate = self._deals[index].with_fields(rate=float(value))
        else:
            candidate = self._deals[index].with_fields(**{field: int(value)})
        return self.place(index, candidate) is not None


    def set_term_months(self, term_months: int) -> None:
        """Change the horizon, dropping deals past it and clipping ends that exceed it."""
        self._term_months = int(term_months)
        kept: list[Deal] = []
        for deal in self._deals:
            if deal.start_month >= self._term_months:
                LOGGER.debug('Dropping deal beyond new term: %s', deal)
                continue
            kept.append(deal.with_fields(end_month=min(deal.end_month, self._term_months)))
        self._deals = kept

    def variable_rate_zones(self) -> list[tuple[int, int]]:
        return variable_rate_zones(self._deals, self._term_months)
