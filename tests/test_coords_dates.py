import pandas as pd

from mortgasim.utils.coords import (
    TimeScale,
    month_to_percent,
    percent_to_month,
    period_index_to_pixel,
    pixel_to_month,
    pixel_to_period_index,
)
from mortgasim.utils.date_utils import (
    date_to_period_index,
    format_date_label,
    month_year_to_period_index,
    period_index_to_date,
    period_label,
    years_to_date,
)


def test_percent_month_mapping_rounds_and_clamps() -> None:
    assert month_to_percent(150, 300) == 50.0
    assert month_to_percent(5, 0) == 0.0
    assert percent_to_month(50.0, 300) == 150
    assert percent_to_month(10.2, 300) == 31
    assert percent_to_month(-10.0, 300) == 0
    assert percent_to_month(130.0, 300) == 300


def test_pixel_to_month() -> None:
    assert pixel_to_month(150.0, 100.0, 600.0, 300) == 25
    assert pixel_to_month(50.0, 100.0, 600.0, 300) == 0
    assert pixel_to_month(900.0, 100.0, 600.0, 300) == 300
    assert pixel_to_month(120.0, 100.0, 0.0, 300) == 0


def test_period_index_date_mapping() -> None:
    assert period_index_to_date(1, '2025-01-15') == pd.Timestamp('2025-01-15')
    assert period_index_to_date(13, '2025-01-15') == pd.Timestamp('2026-01-15')
    assert period_index_to_date(2, '2025-01-31') == pd.Timestamp('2025-02-28')
    assert date_to_period_index('2026-03-02', '2025-01-15') == 15
    assert date_to_period_index('2024-12-01', '2025-01-15') == 0


def test_month_year_to_period_index_has_floor_of_one() -> None:
    assert month_year_to_period_index(6, 2025, '2025-01-01') == 6
    assert month_year_to_period_index(1, 2026, '2025-03-01') == 11
    assert month_year_to_period_index(1, 2020, '2025-03-01') == 1


def test_labels() -> None:
    assert format_date_label('2025-12-03') == 'Dec 2025'
    assert period_label(3, '2025-11-01') == 'Jan 2026'
    assert years_to_date(1.5, '2025-01-01') == pd.Timestamp('2026-07-01')


def test_time_scale_round_trip_and_clamping() -> None:
    scale = TimeScale(left=0.0, right=1000.0, start=pd.Timestamp('2025-01-01'), end=pd.Timestamp('2035-01-01'))
    assert scale.contains_pixel(0.0) and scale.contains_pixel(1000.0)
    assert not scale.contains_pixel(-1.0)
    x = period_index_to_pixel(25, scale, '2025-01-01')
    assert pixel_to_period_index(x + 1.0, scale, '2025-01-01', 120) == 25
    assert pixel_to_period_index(-500.0, scale, '2025-01-01', 120) == 1
    assert pixel_to_period_index(5000.0, scale, '2025-01-01', 120) == 120


def test_degenerate_scale() -> None:
    scale = TimeScale(left=10.0, right=10.0, start=pd.Timestamp('2025-01-01'), end=pd.Timestamp('2025-01-01'))
    assert scale.value_for_pixel(10.0) is None
    assert pixel_to_period_index(10.0, scale, '2025-01-01', 12) is None
    assert scale.pixel_for_value('2026-01-01') == 10.0
