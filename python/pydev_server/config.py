"""Runtime configuration for the pydev server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

LOG_LEVEL_ENV = "PYDEV_LOG"
LOG_FILE_ENV = "PYDEV_LOG_FILE"
CLOSE_TIMEOUT_ENV = "PYDEV_CLOSE_TIMEOUT"
BANNER_ENV = "PYDEV_BANNER"

_FALSE_VALUES = {"0", "false", "no", "off"}


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class ServerConfig:
    log_level: str = "INFO"
    log_file: Optional[str] = None
    close_timeout: float = 1.0
    banner: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """Build a config from PYDEV_* variables; unset or invalid values keep defaults."""
        env = os.environ if environ is None else environ
        config = cls()
        config.log_level = env.get(LOG_LEVEL_ENV) or config.log_level
        config.log_file = env.get(LOG_FILE_ENV) or None
        timeout = _to_float(env.get(CLOSE_TIMEOUT_ENV))
        if timeout is not None and timeout >= 0:
            config.close_timeout = timeout
        banner = env.get(BANNER_ENV)
        if banner is not None:
            config.banner = banner.strip().lower() not in _FALSE_VALUES
        return config


__all__ = [
    "BANNER_ENV",
    "CLOSE_TIMEOUT_ENV",
    "LOG_FILE_ENV",
    "LOG_LEVEL_ENV",
    "ServerConfig",
]
