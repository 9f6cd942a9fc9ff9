"""Pointer drag sessions over the deal timeline widget."""

from __future__ import annotations

from dataclasses import dataclass

from mortgasim.calculations.deal_timeline import DealTimeline
from mortgasim.models.deal import Deal
from mortgasim.utils.coords import pixel_to_month

DRAG_MODES = ('move', 'resize-start', 'resize-end')


@dataclass(frozen=True)
class TimelineGeometry:
    """Pixel bounds of the timeline bar."""

    left: float
    width: float


class DealDragSession:
    """One drag gesture on a deal body or edge handle.

    Each pointer move is applied to the snapshot taken at pointer-down plus the
    total displacement since then; a move that fails validation leaves the
    timeline where it was for that frame.
    """

    def __init__(
        self,
        timeline: DealTimeline,
        index: int,
        mode: str,
        start_pixel: float,
        geometry: TimelineGeometry,
    ) -> None:
        if mode not in DRAG_MODES:
            raise ValueError(f'Unknown drag mode: {mode}')
        self.timeline = timeline
        self.index = int(index)
        self.mode = mode
        self.start_pixel = float(start_pixel)
        self.geometry = geometry
        self.origin: Deal = timeline.deals[self.index]
        self.active = True

    def _month_at(self, pixel_x: float) -> int:
        return pixel_to_month(pixel_x, self.geometry.left, self.geometry.width, self.timeline.term_months)

    def update(self, pixel_x: float) -> bool:
        """Apply the pointer position; returns whether the timeline changed.

        The deal may pass a neighbour and change position, so the session
        follows the index :meth:`DealTimeline.place` reports.
        """
        if not self.active:
            return False
        current = self._month_at(pixel_x)
        if self.mode == 'move':
            candidate = self.timeline.moved(self.origin, current - self._month_at(self.start_pixel))
        elif self.mode == 'resize-start':
            candidate = self.timeline.resized_start(self.origin, current)
        else:
            candidate = self.timeline.resized_end(self.origin, current)
        if candidate == self.timeline.deals[self.index]:
            return False
        new_index = self.timeline.place(self.index, candidate)
        if new_index is None:
            return False
        self.index = new_index
        return True

    def end(self) -> None:
        self.active = False


class TimelineDragController:
    """Tracks at most one drag session; a new pointer-down replaces the current one."""

    def __init__(self, timeline: DealTimeline, geometry: TimelineGeometry) -> None:
        self.timeline = timeline
        self.geometry = geometry
        self.session: DealDragSession | None = None
        self.selected_index: int | None = None

    def pointer_down(self, index: int, mode: str, pixel_x: float) -> DealDragSession:
        if self.session is not None:
            self.session.end()
        self.selected_index = index
        self.session = DealDragSession(self.timeline, index, mode, pixel_x, self.geometry)
        return self.session

    def pointer_move(self, pixel_x: float) -> bool:
        if self.session is None:
            return False
        changed = self.session.update(pixel_x)
        self.selected_index = self.session.index
        return changed

    def pointer_up(self) -> None:
        if self.session is not None:
            self.session.end()
        self.session = None

    @property
    def is_dragging(self) -> bool:
        return self.session is not None and self.session.active
