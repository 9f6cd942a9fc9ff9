"""Shareable links and SEO-style URL slugs for form state."""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit

from mortgasim.data.validator import parse_form_payload
from mortgasim.models.form import MortgageFormData
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

SHARE_PARAM = 'state'
_SLUG_RE = re.compile(r'^(\d+(?:\.\d+)?)(k?)-over-(\d+)-years?-at-(\d+(?:\.\d+)?)-percent$')


def encode_form_state(form: MortgageFormData) -> str:
    raw = json.dumps(form.to_dict(), sort_keys=True, separators=(',', ':'))
    return base64.urlsafe_b64encode(raw.encode('utf-8')).decode('ascii')


def decode_form_state(value: str | None) -> MortgageFormData | None:
    """Reverse :func:`encode_form_state`; any failure yields ``None``."""
    if not value:
        return None
    try:
        padded = value + '=' * (-len(value) % 4)
        raw = base64.urlsafe_b64decode(padded.encode('ascii'))
        return parse_form_payload(json.loads(raw.decode('utf-8')))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        LOGGER.warning('Discarding undecodable share link state: %s', exc)
        return None


def generate_share_link(form: MortgageFormData, base_url: str) -> str:
    base = base_url.split('?', 1)[0]
    return f'{base}?{urlencode({SHARE_PARAM: encode_form_state(form)})}'


def form_from_share_link(url: str) -> MortgageFormData | None:
    values = parse_qs(urlsplit(url).query).get(SHARE_PARAM, [])
    return decode_form_state(values[0]) if values else None


def form_from_query_params(params: dict[str, Any]) -> MortgageFormData | None:
    """Decode the share parameter from a Streamlit-style query param mapping."""
    value = params.get(SHARE_PARAM)
    if isinstance(value, list):
        value = value[0] if value else None
    return decode_form_state(value)


def parse_mortgage_slug(slug: str) -> dict[str, float] | None:
    """Parse ``300k-over-25-years-at-4.5-percent`` into loan/term/rate, with range checks."""
    match = _SLUG_RE.match(slug.strip('/').lower())
    if match is None:
        return None
    loan_str, k_suffix, term_str, rate_str = match.groups()
    loan = float(loan_str) * (1000 if k_suffix else 1)
    term = int(term_str)
    rate = float(rate_str)
    if not 1000 <= loan <= 10_000_000:
        return None
    if not 1 <= term <= 40:
        return None
    if not 0 <= rate <= 15:
        return None
    return {'loan': loan, 'term': term, 'rate': rate}


def _plain(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def generate_mortgage_slug(loan: float, term: int, rate: float) -> str:
    loan_display = f'{_plain(loan / 1000)}k' if loan >= 1000 else _plain(loan)
    return f'{loan_display}-over-{int(term)}-years-at-{_plain(rate)}-percent'


def form_from_slug(slug: str, base: MortgageFormData | None = None) -> MortgageFormData | None:
    params = parse_mortgage_slug(slug)
    if params is None:
        return None
    form = base or MortgageFormData()
    deals = [d.with_fields(rate=params['rate']) for d in form.deals[:1]]
    return form.with_fields(
        mortgage_amount=params['loan'],
        term_years=params['term'],
        fixed_rate=params['rate'],
        deals=deals,
    )
