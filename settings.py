from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_LOG_LEVEL_ENV = "LOG_LEVEL"
_HUB_TIMEOUT_ENV = "HUB_REQUEST_TIMEOUT"
_CACHE_MAX_AGE_ENV = "DISCOVERY_CACHE_MAX_AGE"
_HUB_INSTANCES_ENV = "HUB_INSTANCES"
_HUB_INSTANCES_PATH_ENV = "HUB_INSTANCES_PATH"
_ZENDURE_API_URL_ENV = "ZENDURE_API_URL"


@dataclass(frozen=True)
class Settings:
    log_level: str
    hub_request_timeout: float
    cache_max_age: int
    hub_instances: str
    hub_instances_path: Optional[str]
    zendure_api_url: Optional[str]


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_non_negative_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        log_level=_read_log_level("INFO"),
        hub_request_timeout=_read_positive_float(_HUB_TIMEOUT_ENV, 10.0),
        cache_max_age=_read_non_negative_int(_CACHE_MAX_AGE_ENV, 300),
        hub_instances=_read_str_env(_HUB_INSTANCES_ENV, ""),
        hub_instances_path=_read_optional_env(_HUB_INSTANCES_PATH_ENV, None),
        zendure_api_url=_read_optional_env(_ZENDURE_API_URL_ENV, None),
    )
