"""Pointer and touch protocol for placing overpayments on the balance chart."""

from __future__ import annotations

from typing import Callable

import pandas as pd

from mortgasim.calculations.overpayments import OverpaymentStore
from mortgasim.models.overpayment import OverpaymentMarker
from mortgasim.utils.coords import TimeScale, period_index_to_pixel, pixel_to_period_index
from mortgasim.utils.logging import get_logger
from mortgasim.utils.scheduling import Scheduler, TimerHandle

LOGGER = get_logger(__name__)

LINE_HIT_THRESHOLD_PX = 20.0
TOUCH_SLOP_PX = 10.0
LONG_PRESS_SECONDS = 0.5
MAX_OVERPAYMENT_AMOUNT = 10_000_000.0


class OverpaymentPopover:
    """Pending, uncommitted amount for an add or edit popover.

    Nothing reaches the store until :meth:`confirm`; :meth:`cancel` discards.
    """

    def __init__(
        self,
        store: OverpaymentStore,
        period_index: int,
        *,
        marker_id: str | None = None,
        amount: float = 0.0,
    ) -> None:
        self.store = store
        self.period_index = int(period_index)
        self.marker_id = marker_id
        self.amount = float(amount)
        self.input_text = '' if amount <= 0 else str(amount)
        self.error: str | None = None
        self.is_open = True

    @property
    def is_new(self) -> bool:
        return self.marker_id is None

    def set_input(self, text: str) -> None:
        self.input_text = text
        value = pd.to_numeric(str(text).strip(), errors='coerce') if str(text).strip() else float('nan')
        if pd.isna(value):
            self.error = None
            self.amount = 0.0
        elif float(value) < 0:
            self.error = 'Amount must be positive'
        elif float(value) > MAX_OVERPAYMENT_AMOUNT:
            self.error = 'Amount too large'
        else:
            self.error = None
            self.amount = float(value)

    @property
    def can_confirm(self) -> bool:
        return self.is_open and self.error is None and 0 < self.amount <= MAX_OVERPAYMENT_AMOUNT

    def confirm(self) -> OverpaymentMarker | None:
        if not self.can_confirm:
            if self.error is None:
                self.error = 'Please enter a valid amount'
            return None
        if self.is_new:
            marker = self.store.add(self.period_index, self.amount)
        else:
            marker = self.store.update(self.marker_id, amount=self.amount)
        self._close()
        return marker

    def delete(self) -> bool:
        if self.is_new or not self.is_open:
            return False
        self.store.remove(self.marker_id)
        self._close()
        return True

    def cancel(self) -> None:
        self._close()

    def _close(self) -> None:
        self.is_open = False
        self.store.set_editing_id(None)


def edit_popover(store: OverpaymentStore, marker: OverpaymentMarker) -> OverpaymentPopover:
    store.set_editing_id(marker.id)
    return OverpaymentPopover(store, marker.period_index, marker_id=marker.id, amount=marker.amount)


def popover_for_period(store: OverpaymentStore, period_index: int) -> OverpaymentPopover:
    """Edit popover for the marker at ``period_index``, or an add popover when the period is free."""
    existing = store.get_at_period(period_index)
    if existing is not None:
        return edit_popover(store, existing)
    return OverpaymentPopover(store, period_index)


class OverpaymentChartInteraction:
    """Translates clicks, drags and long-presses on the chart into store edits."""

    def __init__(
        self,
        store: OverpaymentStore,
        scale: TimeScale,
        max_period: int,
        scheduler: Scheduler,
        *,
        hit_threshold: float = LINE_HIT_THRESHOLD_PX,
        touch_slop: float = TOUCH_SLOP_PX,
        long_press_seconds: float = LONG_PRESS_SECONDS,
        on_haptic: Callable[[], None] | None = None,
    ) -> None:
        self.store = store
        self.scale = scale
        self.max_period = int(max_period)
        self.scheduler = scheduler
        self.hit_threshold = float(hit_threshold)
        self.touch_slop = float(touch_slop)
        self.long_press_seconds = float(long_press_seconds)
        self.on_haptic = on_haptic
        self.popover: OverpaymentPopover | None = None
        self.dragging_id: str | None = None
        self._long_press: TimerHandle | None = None
        self._touch_origin: tuple[float, float] | None = None

    @property
    def is_dragging(self) -> bool:
        return self.dragging_id is not None

    def _period_at(self, pixel_x: float) -> int | None:
        if not self.store.start_date:
            return None
        return pixel_to_period_index(pixel_x, self.scale, self.store.start_date, self.max_period)

    def find_marker_at_pixel(self, pixel_x: float) -> OverpaymentMarker | None:
        if not self.store.start_date:
            return None
        best: OverpaymentMarker | None = None
        best_dist = self.hit_threshold
        for marker in self.store.markers:
            dist = abs(pixel_x - period_index_to_pixel(marker.period_index, self.scale, self.store.start_date))
            if dist < best_dist:
                best, best_dist = marker, dist
        return best

    def _open_add(self, pixel_x: float) -> OverpaymentPopover | None:
        period_index = self._period_at(pixel_x)
        if period_index is None:
            return None
        self.popover = OverpaymentPopover(self.store, period_index)
        return self.popover

    def click(self, pixel_x: float) -> OverpaymentPopover | None:
        """Desktop click: edit the marker under the pointer or start adding one."""
        if self.is_dragging or not self.scale.contains_pixel(pixel_x):
            return None
        existing = self.find_marker_at_pixel(pixel_x)
        if existing is not None:
            self.popover = edit_popover(self.store, existing)
            return self.popover
        return self._open_add(pixel_x)

    def _start_drag(self, marker: OverpaymentMarker) -> None:
        if self.dragging_id is not None:
            self.store.set_dragging(self.dragging_id, False)
        self.dragging_id = marker.id
        self.store.set_dragging(marker.id, True)

    def _drag_to(self, pixel_x: float) -> None:
        period_index = self._period_at(pixel_x)
        if period_index is not None and self.dragging_id is not None:
            self.store.update(self.dragging_id, period_index=period_index)

    def _end_drag(self) -> None:
        if self.dragging_id is not None:
            self.store.set_dragging(self.dragging_id, False)
        self.dragging_id = None

    def pointer_down(self, pixel_x: float) -> bool:
        marker = self.find_marker_at_pixel(pixel_x)
        if marker is None:
            return False
        self._start_drag(marker)
        return True

    def pointer_move(self, pixel_x: float) -> None:
        if self.is_dragging:
            self._drag_to(pixel_x)

    def pointer_up(self) -> None:
        self._end_drag()

    def _clear_long_press(self) -> None:
        if self._long_press is not None:
            self._long_press.cancel()
            self._long_press = None

    def touch_start(self, pixel_x: float, pixel_y: float) -> bool:
        """Touch on a marker drags it immediately; elsewhere arms the long-press timer."""
        self._touch_origin = (pixel_x, pixel_y)
        marker = self.find_marker_at_pixel(pixel_x)
        if marker is not None:
            self._start_drag(marker)
            return True
        self._clear_long_press()
        self._long_press = self.scheduler.call_later(
            self.long_press_seconds,
            lambda: self._on_long_press(pixel_x),
        )
        return False

    def _on_long_press(self, pixel_x: float) -> None:
        self._long_press = None
        if not self.scale.contains_pixel(pixel_x):
            return
        if self._open_add(pixel_x) is not None and self.on_haptic is not None:
            self.on_haptic()

    def touch_move(self, pixel_x: float, pixel_y: float) -> None:
        if self._touch_origin is not None and self._long_press is not None:
            dx = abs(pixel_x - self._touch_origin[0])
            dy = abs(pixel_y - self._touch_origin[1])
            if dx > self.touch_slop or dy > self.touch_slop:
                LOGGER.debug('Long press cancelled by touch movement')
                self._clear_long_press()
        if self.is_dragging:
            self._drag_to(pixel_x)

    def touch_end(self) -> None:
        self._clear_long_press()
        self._touch_origin = None
        self._end_drag()
