import itertools
import random

import pytest

from mortgasim.calculations.overpayments import OverpaymentStore, format_api_number, parse_api_string


def _store(start_date: str | None = '2025-01-15') -> OverpaymentStore:
    counter = itertools.count(1)
    return OverpaymentStore(start_date, id_factory=lambda: f'op-{next(counter)}')


def test_add_requires_start_date() -> None:
    store = _store(None)
    assert store.add(3, 100.0) is None
    assert len(store) == 0


def test_add_at_occupied_period_updates_amount() -> None:
    store = _store()
    first = store.add(5, 100.0)
    second = store.add(5, 250.0)
    assert len(store) == 1
    assert second.id == first.id
    assert store.get_at_period(5).amount == 250.0
    assert store.editing_id == first.id


def test_add_rejects_invalid_period_and_negative_amount() -> None:
    store = _store()
    assert store.add(0, 100.0) is None
    assert store.add(4, -1.0) is None
    assert len(store) == 0


def test_markers_are_sorted_and_labelled() -> None:
    store = _store('2025-01-15')
    store.add(13, 500.0)
    store.add(1, 100.0)
    assert [m.period_index for m in store.markers] == [1, 13]
    assert [m.date_label for m in store.markers] == ['Jan 2025', 'Jan 2026']

    store.set_start_date('2024-06-01')
    assert [m.date_label for m in store.markers] == ['Jun 2024', 'Jun 2025']


def test_update_moves_and_relabels() -> None:
    store = _store('2025-01-01')
    a = store.add(2, 100.0)
    store.add(6, 200.0)
    moved = store.update(a.id, period_index=10)
    assert moved.period_index == 10
    assert moved.date_label == 'Oct 2025'
    assert [m.period_index for m in store.markers] == [6, 10]


def test_update_onto_occupied_period_is_rejected() -> None:
    store = _store()
    a = store.add(2, 100.0)
    store.add(6, 200.0)
    assert store.update(a.id, period_index=6) is None
    assert sorted(m.period_index for m in store.markers) == [2, 6]


def test_update_validation() -> None:
    store = _store()
    a = store.add(2, 100.0)
    assert store.update(a.id, amount=-5) is None
    assert store.update(a.id, period_index=0) is None
    assert store.update('missing', amount=10) is None
    with pytest.raises(ValueError):
        store.update(a.id, date_label='Feb 2030')
    assert store.get(a.id).amount == 100.0


def test_remove_clears_editing_id() -> None:
    store = _store()
    marker = store.add(3, 100.0)
    assert store.editing_id == marker.id
    store.remove(marker.id)
    assert store.editing_id is None
    assert len(store) == 0


def test_clear_all_and_dragging_flag() -> None:
    store = _store()
    marker = store.add(3, 100.0)
    store.set_dragging(marker.id, True)
    assert store.get(marker.id).is_dragging is True
    store.clear_all()
    assert store.markers == ()
    assert store.editing_id is None


def test_api_string_skips_non_positive_amounts() -> None:
    store = _store()
    store.add(3, 100.0)
    store.add(1, 250.5)
    store.add(7, 0.0)
    assert store.to_api_string() == '1:250.5,3:100'


def test_api_string_is_none_without_positive_amounts() -> None:
    store = _store()
    assert store.to_api_string() is None
    store.add(4, 0.0)
    assert store.to_api_string() is None


def test_parse_api_string() -> None:
    assert parse_api_string('1:250.5,3:100') == [(1, 250.5), (3, 100.0)]
    assert parse_api_string('') == []
    assert parse_api_string(None) == []
    with pytest.raises(ValueError):
        parse_api_string('12')
    with pytest.raises(ValueError):
        parse_api_string('a:b')


def test_format_api_number() -> None:
    assert format_api_number(5000.0) == '5000'
    assert format_api_number(99.99) == '99.99'
    assert format_api_number(0.00005) == '0.00005'
    assert format_api_number(1e21) == '1000000000000000000000'


def test_snapshot_drops_dragging_and_restores_markers() -> None:
    store = _store('2025-03-01')
    marker = store.add(4, 1200.0)
    store.set_dragging(marker.id, True)
    snapshot = store.to_snapshot()
    assert snapshot['start_date'] == '2025-03-01'
    assert 'is_dragging' not in snapshot['chart_overpayments'][0]

    restored = OverpaymentStore.from_snapshot(snapshot)
    assert restored.get(marker.id).period_index == 4
    assert restored.get(marker.id).is_dragging is False
    assert restored.get(marker.id).date_label == 'Jun 2025'


def test_snapshot_with_duplicate_periods_keeps_first() -> None:
    snapshot = {
        'start_date': '2025-01-01',
        'chart_overpayments': [
            {'id': 'a', 'period_index': 3, 'amount': 100.0},
            {'id': 'b', 'period_index': 3, 'amount': 200.0},
        ],
    }
    store = OverpaymentStore.from_snapshot(snapshot)
    assert [m.id for m in store.markers] == ['a']


def test_from_pairs() -> None:
    store = OverpaymentStore.from_pairs('2025-01-01', parse_api_string('12:500,24:500'))
    assert store.to_api_string() == '12:500,24:500'
    assert store.editing_id is None


def test_random_adds_keep_one_marker_per_period() -> None:
    rng = random.Random(3)
    store = _store()
    for _ in range(300):
        store.add(rng.randint(1, 40), rng.choice([0.0, 50.0, 125.5]))
        periods = [m.period_index for m in store.markers]
        assert len(periods) == len(set(periods))
