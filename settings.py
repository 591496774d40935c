from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_SERIAL_PORT_ENV = "TELEMETRY_SERIAL_PORT"
_BAUD_RATE_ENV = "TELEMETRY_BAUD_RATE"
_POLL_INTERVAL_ENV = "TELEMETRY_POLL_INTERVAL"
_SETTLE_SECONDS_ENV = "TELEMETRY_SETTLE_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SERIAL_PORT = "/dev/ttyACM0"
DEFAULT_BAUD_RATE = 9600
DEFAULT_POLL_INTERVAL = 0.01
DEFAULT_SETTLE_SECONDS = 2.0


@dataclass(frozen=True)
class Settings:
    serial_port: str
    baud_rate: int
    poll_interval: float
    settle_seconds: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_int_env(name: str, default: int) -> int:
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


def _read_float_env(name: str, default: float, allow_zero: bool = False) -> float:
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
    if parsed < 0 or (parsed == 0 and not allow_zero):
        return default
    return parsed


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
        serial_port=_read_str_env(_SERIAL_PORT_ENV, DEFAULT_SERIAL_PORT),
        baud_rate=_read_int_env(_BAUD_RATE_ENV, DEFAULT_BAUD_RATE),
        poll_interval=_read_float_env(_POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL),
        settle_seconds=_read_float_env(
            _SETTLE_SECONDS_ENV, DEFAULT_SETTLE_SECONDS, allow_zero=True
        ),
        log_level=_read_log_level("INFO"),
    )
