import os
import math
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from moyori.stations import DEFAULT_CANDIDATE_LIMIT, DEFAULT_SEARCH_RADIUS_KM


logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {'', 'your_api_key_here'}
ROUTING_PROVIDERS = ('navitime', 'google')
MATRIX_POLICIES = ('sequential', 'concurrent')


@dataclass
class Settings:
    """Process configuration, read once and passed to the services that need it"""
    routing_provider: str = 'navitime'
    rapidapi_key: Optional[str] = None
    google_maps_api_key: Optional[str] = None
    matrix_policy: str = 'sequential'
    request_delay_ms: int = 100
    max_workers: int = 10
    max_candidates: int = DEFAULT_CANDIDATE_LIMIT
    search_radius_km: float = DEFAULT_SEARCH_RADIUS_KM
    max_travel_time_minutes: float = 60
    log_level: str = 'INFO'

    @property
    def routing_api_key(self) -> Optional[str]:
        if self.routing_provider == 'google':
            return self.google_maps_api_key
        return self.rapidapi_key

    @property
    def routing_configured(self) -> bool:
        return self.routing_api_key is not None


def _clean_key(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip() in PLACEHOLDER_KEYS:
        return None
    return value.strip()


def _positive(value) -> bool:
    return value > 0


def _non_negative(value) -> bool:
    return value >= 0


def _env_number(name: str, default, cast, valid=_positive):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = cast(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value) or not valid(value):
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    return value


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load settings from the environment (and a .env file if present)"""
    load_dotenv(dotenv_path=dotenv_path)

    provider = os.getenv('ROUTING_PROVIDER', 'navitime').strip().lower()
    if provider not in ROUTING_PROVIDERS:
        logger.warning(f"Unknown ROUTING_PROVIDER {provider!r}, falling back to navitime")
        provider = 'navitime'

    policy = os.getenv('MATRIX_POLICY', 'sequential').strip().lower()
    if policy not in MATRIX_POLICIES:
        logger.warning(f"Unknown MATRIX_POLICY {policy!r}, falling back to sequential")
        policy = 'sequential'

    return Settings(
        routing_provider=provider,
        rapidapi_key=_clean_key(os.getenv('RAPIDAPI_KEY')),
        google_maps_api_key=_clean_key(os.getenv('GOOGLE_MAPS_API_KEY')),
        matrix_policy=policy,
        request_delay_ms=_env_number('REQUEST_DELAY_MS', 100, int, valid=_non_negative),
        max_workers=_env_number('MAX_WORKERS', 10, int),
        max_candidates=_env_number('MAX_CANDIDATES', DEFAULT_CANDIDATE_LIMIT, int),
        search_radius_km=_env_number('SEARCH_RADIUS_KM', DEFAULT_SEARCH_RADIUS_KM, float),
        max_travel_time_minutes=_env_number('MAX_TRAVEL_TIME_MINUTES', 60, float),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    )
