from __future__ import annotations

import json

from mortgasim.calculations.overpayments import OverpaymentStore
from mortgasim.dashboard.state_store import (
    FORM_STORE_FILENAME,
    MAX_AGE_MS,
    OVERPAYMENT_STORE_FILENAME,
    STORE_VERSION,
    load_form_store,
    load_overpayment_store,
    save_form_store,
    save_overpayment_store,
)
from mortgasim.models.deal import Deal
from mortgasim.models.form import MortgageFormData

NOW = 1_750_000_000_000


def test_missing_form_store_returns_none(tmp_path) -> None:
    assert load_form_store(tmp_path / FORM_STORE_FILENAME, now_ms=NOW) is None


def test_form_store_roundtrip(tmp_path) -> None:
    p = tmp_path / FORM_STORE_FILENAME
    form = MortgageFormData(start_date='2025-02-01', mortgage_amount=320000.0, deals=(Deal(0, 60, 3.9),))
    save_form_store(p, form, now_ms=NOW)

    parsed = json.loads(p.read_text(encoding='utf-8'))
    assert parsed['version'] == STORE_VERSION
    assert parsed['timestamp'] == NOW
    assert parsed['data']['mortgage_amount'] == 320000.0

    loaded = load_form_store(p, now_ms=NOW + 1000)
    assert loaded == form


def test_stale_form_store_is_discarded_and_removed(tmp_path) -> None:
    p = tmp_path / FORM_STORE_FILENAME
    save_form_store(p, MortgageFormData(start_date='2025-02-01'), now_ms=NOW)
    assert load_form_store(p, now_ms=NOW + MAX_AGE_MS + 1) is None
    assert not p.exists()


def test_version_mismatch_and_corrupt_json_are_discarded(tmp_path) -> None:
    p = tmp_path / FORM_STORE_FILENAME
    p.write_text(json.dumps({'version': '0.9.0', 'timestamp': NOW, 'data': {}}), encoding='utf-8')
    assert load_form_store(p, now_ms=NOW) is None
    assert not p.exists()

    p.write_text('{not json', encoding='utf-8')
    assert load_form_store(p, now_ms=NOW) is None
    assert not p.exists()


def test_invalid_form_values_are_discarded(tmp_path) -> None:
    p = tmp_path / FORM_STORE_FILENAME
    data = MortgageFormData(start_date='2025-02-01').to_dict()
    data['mortgage_amount'] = 10
    p.write_text(json.dumps({'version': STORE_VERSION, 'timestamp': NOW, 'data': data}), encoding='utf-8')
    assert load_form_store(p, now_ms=NOW) is None


def test_overpayment_store_roundtrip(tmp_path) -> None:
    p = tmp_path / OVERPAYMENT_STORE_FILENAME
    store = OverpaymentStore('2025-01-01')
    marker = store.add(6, 1500.0)
    store.set_dragging(marker.id, True)
    save_overpayment_store(p, store)

    loaded = load_overpayment_store(p)
    assert loaded.start_date == '2025-01-01'
    assert loaded.get(marker.id).amount == 1500.0
    assert loaded.get(marker.id).is_dragging is False


def test_corrupt_overpayment_store_falls_back_to_empty(tmp_path) -> None:
    p = tmp_path / OVERPAYMENT_STORE_FILENAME
    assert len(load_overpayment_store(p)) == 0

    p.write_text('[1, 2, 3]', encoding='utf-8')
    assert len(load_overpayment_store(p)) == 0
    assert not p.exists()

    p.write_text(json.dumps({'chart_overpayments': [{'id': 'x'}]}), encoding='utf-8')
    assert len(load_overpayment_store(p)) == 0


def test_form_store_with_non_mapping_entries_is_discarded(tmp_path) -> None:
    p = tmp_path / FORM_STORE_FILENAME
    data = MortgageFormData(start_date='2025-02-01').to_dict()
    data['savings_accounts'] = ['x']
    p.write_text(json.dumps({'version': STORE_VERSION, 'timestamp': NOW, 'data': data}), encoding='utf-8')
    assert load_form_store(p, now_ms=NOW) is None
    assert not p.exists()


def test_overpayment_store_with_non_mapping_marker_is_discarded(tmp_path) -> None:
    p = tmp_path / OVERPAYMENT_STORE_FILENAME
    p.write_text(json.dumps({'chart_overpayments': [3], 'start_date': '2025-01-01'}), encoding='utf-8')
    assert len(load_overpayment_store(p)) == 0
    assert not p.exists()
