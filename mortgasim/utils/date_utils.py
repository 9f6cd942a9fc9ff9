"""Date helpers mapping period indices to calendar months."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd


def to_timestamp(value: pd.Timestamp | datetime | date | str) -> pd.Timestamp:
    """Convert an input value to a timezone-naive pandas Timestamp."""
    ts = pd.Timestamp(value)
    if ts.tz is not None:
        ts = ts.tz_convert(None)
    return ts


def add_months(value: pd.Timestamp | date | str, months: int) -> pd.Timestamp:
    """Shift by whole months; the day is clamped to the target month's length."""
    return to_timestamp(value) + pd.DateOffset(months=int(months))


def period_index_to_date(period_index: int, start_date: pd.Timestamp | date | str) -> pd.Timestamp:
    """Return the calendar date of a 1-based period index."""
    return add_months(start_date, int(period_index) - 1)


def date_to_period_index(value: pd.Timestamp | date | str, start_date: pd.Timestamp | date | str) -> int:
    """Return the 1-based period index of the month containing ``value`` (unclamped)."""
    target = to_timestamp(value)
    start = to_timestamp(start_date)
    return (target.year - start.year) * 12 + (target.month - start.month) + 1


def month_year_to_period_index(month: int, year: int, start_date: pd.Timestamp | date | str) -> int:
    """Convert a calendar month (1-12) and year to a period index, never below 1."""
    return max(1, date_to_period_index(pd.Timestamp(year=int(year), month=int(month), day=1), start_date))


def format_date_label(value: pd.Timestamp | date | str) -> str:
    """Short month label, e.g. ``Dec 2025``."""
    return to_timestamp(value).strftime('%b %Y')


def period_label(period_index: int, start_date: pd.Timestamp | date | str) -> str:
    return format_date_label(period_index_to_date(period_index, start_date))


def years_to_date(years: float, start_date: pd.Timestamp | date | str) -> pd.Timestamp:
    """Convert fractional years since start (as returned by the API) to a date."""
    return add_months(start_date, int(round(float(years) * 12)))
