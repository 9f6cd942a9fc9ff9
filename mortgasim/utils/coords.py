"""Pixel, month and chart-time coordinate mapping."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

from mortgasim.utils.date_utils import date_to_period_index, period_index_to_date, to_timestamp


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def month_to_percent(month: float, term_months: int) -> float:
    if term_months <= 0:
        return 0.0
    return float(month) / float(term_months) * 100.0


def percent_to_month(percent: float, term_months: int) -> int:
    """Map a timeline percentage to the nearest month, clamped to [0, term_months]."""
    month = _round_half_up(float(percent) / 100.0 * float(term_months))
    return int(np.clip(month, 0, term_months))


def pixel_to_month(pixel_x: float, left: float, width: float, term_months: int) -> int:
    """Map a pointer x position on a timeline element to a month index."""
    if width <= 0:
        return 0
    percent = float(np.clip((float(pixel_x) - float(left)) / float(width) * 100.0, 0.0, 100.0))
    return percent_to_month(percent, term_months)


@dataclass(frozen=True)
class TimeScale:
    """Linear mapping between chart-area pixels and timestamps.

    ``left``/``right`` are the pixel bounds of the plot area; ``start``/``end``
    are the timestamps drawn at those bounds.
    """

    left: float
    right: float
    start: pd.Timestamp
    end: pd.Timestamp

    def contains_pixel(self, pixel_x: float) -> bool:
        return self.left <= pixel_x <= self.right

    def value_for_pixel(self, pixel_x: float) -> pd.Timestamp | None:
        span_px = self.right - self.left
        if span_px <= 0:
            return None
        start = to_timestamp(self.start)
        span = to_timestamp(self.end) - start
        fraction = (float(pixel_x) - self.left) / span_px
        return start + span * fraction

    def pixel_for_value(self, value: pd.Timestamp | date | str) -> float:
        start = to_timestamp(self.start)
        span_ns = (to_timestamp(self.end) - start).value
        if span_ns == 0:
            return float(self.left)
        fraction = (to_timestamp(value) - start).value / span_ns
        return float(self.left + fraction * (self.right - self.left))


def pixel_to_period_index(
    pixel_x: float,
    scale: TimeScale,
    start_date: pd.Timestamp | date | str,
    max_period: int,
) -> int | None:
    """Chart pixel -> timestamp -> 1-based period index, clamped to [1, max_period]."""
    ts = scale.value_for_pixel(pixel_x)
    if ts is None:
        return None
    period_index = date_to_period_index(ts, start_date)
    return int(np.clip(period_index, 1, max(1, int(max_period))))


def period_index_to_pixel(period_index: int, scale: TimeScale, start_date: pd.Timestamp | date | str) -> float:
    return scale.pixel_for_value(period_index_to_date(period_index, start_date))
