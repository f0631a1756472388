from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_CONFIG_PATH_ENV = "HOUSESENSOR_CONFIG"
_LOG_PATH_ENV = "HOUSESENSOR_LOG_PATH"
_ARCHIVE_DIR_ENV = "HOUSESENSOR_ARCHIVE_DIR"
_ARCHIVE_EXT_ENV = "HOUSESENSOR_ARCHIVE_EXT"
_EVENT_DEPTH_ENV = "HOUSESENSOR_EVENT_DEPTH"
_QUIET_PERIOD_ENV = "HOUSESENSOR_QUIET_PERIOD"
_TICK_INTERVAL_ENV = "HOUSESENSOR_TICK_INTERVAL"
_HOST_ENV = "HOUSESENSOR_HOST"
_W1_ROOT_ENV = "HOUSESENSOR_W1_ROOT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    config_path: str
    raw_log_path: str
    archive_dir: str
    archive_extension: str
    event_depth: int
    quiet_period: int
    tick_interval: float
    host_name: Optional[str]
    w1_root: str
    log_level: str


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


def _read_positive_int(name: str, default: int) -> int:
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
    return parsed if parsed > 0 else default


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
        config_path=_read_str_env(_CONFIG_PATH_ENV, "/etc/house/sensor.config"),
        raw_log_path=_read_str_env(_LOG_PATH_ENV, "/dev/shm/housesensor.csv"),
        archive_dir=_read_str_env(_ARCHIVE_DIR_ENV, "/var/lib/house/sensor"),
        archive_extension=_read_str_env(_ARCHIVE_EXT_ENV, "csv").lstrip("."),
        event_depth=_read_positive_int(_EVENT_DEPTH_ENV, 8192),
        quiet_period=_read_positive_int(_QUIET_PERIOD_ENV, 10),
        tick_interval=_read_positive_float(_TICK_INTERVAL_ENV, 1.0),
        host_name=_read_optional_env(_HOST_ENV, None),
        w1_root=_read_str_env(_W1_ROOT_ENV, "/sys/bus/w1/devices"),
        log_level=_read_log_level("INFO"),
    )
