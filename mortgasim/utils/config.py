"""Environment-driven runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEVELOPMENT_API_URL = 'http://127.0.0.1:8000'
PRODUCTION_API_URL = 'https://api.mortgasim.com'
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_SHARE_BASE_URL = 'http://localhost:8501/'


@dataclass(frozen=True)
class AppConfig:
    api_base_url: str
    api_timeout: float
    environment: str
    state_dir: Path
    share_base_url: str
    log_level: str

    @property
    def is_development(self) -> bool:
        return self.environment == 'development'


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f'Environment variable {name} must be numeric, got {raw!r}') from exc


def load_config() -> AppConfig:
    """Read configuration from the environment (and a local ``.env`` if present)."""
    load_dotenv()
    environment = os.getenv('MORTGASIM_ENV', 'development').strip().lower() or 'development'
    default_url = DEVELOPMENT_API_URL if environment == 'development' else PRODUCTION_API_URL
    api_base_url = os.getenv('MORTGASIM_API_BASE_URL', '').strip() or default_url
    return AppConfig(
        api_base_url=api_base_url.rstrip('/'),
        api_timeout=_float_env('MORTGASIM_API_TIMEOUT', DEFAULT_TIMEOUT_SECONDS),
        environment=environment,
        state_dir=Path(os.getenv('MORTGASIM_STATE_DIR', '.')).expanduser(),
        share_base_url=os.getenv('MORTGASIM_SHARE_BASE_URL', DEFAULT_SHARE_BASE_URL),
        log_level=os.getenv('MORTGASIM_LOG_LEVEL', 'INFO'),
    )
