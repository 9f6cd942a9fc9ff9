"""HTTP client for the external mortgage simulation API."""

from __future__ import annotations

from typing import Any

import requests

from mortgasim.utils.config import AppConfig, load_config
from mortgasim.utils.logging import get_logger

LOGGER = get_logger(__name__)

SCHEDULE_TYPES = ('none', 'fixed', 'lump_sum', 'yearly_bonus', 'custom')


class MortgageApiError(Exception):
    """Raised when the simulation API cannot be reached or returns an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MortgageApiValidationError(MortgageApiError):
    """HTTP 422 from the API, message built from its ``detail`` entries."""


def format_validation_error(payload: Any) -> str:
    details = payload.get('detail', []) if isinstance(payload, dict) else []
    if not isinstance(details, list) or not details:
        return 'Validation Error'
    parts = []
    for detail in details:
        if not isinstance(detail, dict):
            parts.append(str(detail))
            continue
        loc = '.'.join(str(x) for x in detail.get('loc', []))
        parts.append(f'{loc}: {detail.get("msg", "")}')
    return f'Validation Error: {", ".join(parts)}'


class MortgageApiClient:
    """Thin wrapper over a ``requests.Session`` bound to the API base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})

    @classmethod
    def from_config(cls, config: AppConfig | None = None) -> MortgageApiClient:
        cfg = config or load_config()
        return cls(cfg.api_base_url, timeout=cfg.api_timeout)

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f'{self.base_url}{path}'
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOGGER.warning('Request to %s failed: %s', url, exc)
            raise MortgageApiError(f'Could not reach simulation API: {exc}') from exc

        if response.status_code == 422:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            message = format_validation_error(payload)
            LOGGER.warning('%s %s rejected: %s', method, path, message)
            raise MortgageApiValidationError(message, status_code=422)
        if response.status_code >= 400:
            LOGGER.warning('%s %s returned HTTP %s', method, path, response.status_code)
            raise MortgageApiError(
                f'Simulation API returned HTTP {response.status_code}',
                status_code=response.status_code,
            )
        return response

    def health_check(self) -> dict[str, Any]:
        return self._request('GET', '/').json()

    def simulate(self, request: dict[str, Any]) -> dict[str, Any]:
        return self._request('POST', '/simulate', json=request).json()

    def export_csv(self, request: dict[str, Any]) -> bytes:
        return self._request('POST', '/simulate/csv', json=request).content

    def get_sample_request(self) -> dict[str, Any]:
        return self._request('GET', '/simulate/sample').json()

    def create_overpayment_schedule(
        self,
        term_months: int,
        schedule_type: str,
        *,
        monthly_amount: float | None = None,
        bonus_month: int | None = None,
        bonus_amount: float | None = None,
        lump_sums: str | None = None,
    ) -> str:
        """Ask the API to expand a schedule template into ``month:amount,...``."""
        if schedule_type not in SCHEDULE_TYPES:
            raise ValueError(f'schedule_type must be one of {SCHEDULE_TYPES}')
        params: dict[str, Any] = {'term_months': int(term_months), 'schedule_type': schedule_type}
        if monthly_amount is not None:
            params['monthly_amount'] = monthly_amount
        if bonus_month is not None:
            params['bonus_month'] = bonus_month
        if bonus_amount is not None:
            params['bonus_amount'] = bonus_amount
        if lump_sums:
            params['lump_sums'] = lump_sums
        return self._request('GET', '/overpayment-schedule/create', params=params).json()
