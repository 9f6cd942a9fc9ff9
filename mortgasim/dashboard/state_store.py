"""Persistent store helpers for form values and chart overpayment markers."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

from mortgasim.calculations.overpayments import OverpaymentStore
from mortgasim.data.validator import parse_form_payload
from mortgasim.models.form import MortgageFormData
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

FORM_STORE_FILENAME = '.mortgasim_form_data.json'
OVERPAYMENT_STORE_FILENAME = '.mortgasim_overpayments.json'
STORE_VERSION = '1.0.0'
MAX_AGE_MS = 30 * 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _write_json(path: str | Path, payload: dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open('w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=True)


def _read_json(path: str | Path) -> Any:
    with Path(path).open('r', encoding='utf-8') as f:
        return json.load(f)


def clear_store(path: str | Path) -> None:
    Path(path).unlink(missing_ok=True)


def save_form_store(path: str | Path, form: MortgageFormData, now_ms: int | None = None) -> None:
    """Persist form values with version and timestamp metadata."""
    _write_json(
        path,
        {
            'version': STORE_VERSION,
            'timestamp': _now_ms() if now_ms is None else int(now_ms),
            'data': form.to_dict(),
        },
    )


def _stored_form(payload: Any, now_ms: int) -> MortgageFormData:
    if not isinstance(payload, dict):
        raise ValueError('Stored form data is not an object.')
    if payload.get('version') != STORE_VERSION:
        raise ValueError(f'Stored form version {payload.get("version")!r} != {STORE_VERSION!r}.')
    timestamp = payload.get('timestamp')
    if not isinstance(timestamp, (int, float)) or timestamp < now_ms - MAX_AGE_MS:
        raise ValueError('Stored form data is older than 30 days.')
    return parse_form_payload(payload.get('data'))


def load_form_store(path: str | Path, now_ms: int | None = None) -> MortgageFormData | None:
    """Load saved form values. Missing, stale or invalid files return ``None``.

    Invalid files are removed so the next load starts clean.
    """
    p = Path(path)
    if not p.exists():
        return None
    try:
        return _stored_form(_read_json(p), _now_ms() if now_ms is None else int(now_ms))
    except (OSError, ValueError) as exc:
        LOGGER.warning('Stored form data is invalid or outdated, clearing %s: %s', p, exc)
        clear_store(p)
        return None


def save_overpayment_store(path: str | Path, store: OverpaymentStore) -> None:
    """Persist chart markers; the transient dragging flag is never written."""
    _write_json(path, store.to_snapshot())


def load_overpayment_store(path: str | Path) -> OverpaymentStore:
    """Load chart markers, falling back to an empty store on a missing or corrupt file."""
    p = Path(path)
    if not p.exists():
        return OverpaymentStore()
    try:
        snapshot = _read_json(p)
        if not isinstance(snapshot, dict):
            raise ValueError('Overpayment snapshot is not an object.')
        return OverpaymentStore.from_snapshot(snapshot)
    except (OSError, KeyError, TypeError, ValueError) as exc:
        LOGGER.warning('Stored overpayments are unreadable, clearing %s: %s', p, exc)
        clear_store(p)
        return OverpaymentStore()
