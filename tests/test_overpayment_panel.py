from mortgasim.dashboard.components.overpayment_popover import consume_selection, period_from_selection

START = '2025-01-01'


def _event(x):
    return {'selection': {'points': [{'x': x, 'y': 150000.0}]}}


def test_period_from_selection_maps_point_date_to_period() -> None:
    assert period_from_selection(_event('2025-01-01'), START, 300) == 1
    assert period_from_selection(_event('2026-03-15'), START, 300) == 15
    assert period_from_selection(_event('2060-01-01'), START, 300) == 300
    assert period_from_selection(_event('2020-01-01'), START, 300) == 1


def test_period_from_selection_without_points() -> None:
    assert period_from_selection(None, START, 300) is None
    assert period_from_selection({'selection': {'points': []}}, START, 300) is None
    assert period_from_selection(_event('not a date'), START, 300) is None


def test_selection_opens_a_popover_once() -> None:
    to_open, remembered = consume_selection(15, None)
    assert (to_open, remembered) == (15, 15)
    # Rerun after confirm or cancel with the chart still holding the point.
    assert consume_selection(15, remembered) == (None, 15)
    assert consume_selection(22, remembered) == (22, 22)


def test_cleared_selection_lets_the_same_point_reopen() -> None:
    assert consume_selection(None, 15) == (None, None)
    assert consume_selection(15, None) == (15, 15)
