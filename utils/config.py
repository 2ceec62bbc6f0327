"""
Configuration utilities for the OmniFocus Stream Deck plugin.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

ENV_FILE = ".ofsd.env"


def load_env_vars() -> None:
    """Read ``.ofsd.env`` from the working directory, then from $HOME.

    Earlier files and the real environment win over later files.
    """
    if os.path.exists(ENV_FILE):
        load_dotenv(ENV_FILE)

    home_env = Path.home() / ENV_FILE
    if home_env.exists():
        load_dotenv(home_env)


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Look up an ``OFSD_*`` setting."""
    return os.getenv(key, default)


def _env_int(name: str, default: int) -> int:
    raw = get_config(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = get_config(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_log_level(name: str, default: str) -> str:
    level = (get_config(name) or "").strip().upper()
    if not level or not isinstance(logging.getLevelName(level), int):
        return default
    return level


@dataclass(frozen=True)
class PluginConfig:
    short_threshold: int = 5
    script_timeout: float = 5.0
    default_refresh_interval: int = 60
    min_refresh_interval: int = 5
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @staticmethod
    def from_env() -> "PluginConfig":
        defaults = PluginConfig()
        return PluginConfig(
            short_threshold=max(1, _env_int("OFSD_SHORT_THRESHOLD", defaults.short_threshold)),
            script_timeout=max(0.5, _env_float("OFSD_SCRIPT_TIMEOUT", defaults.script_timeout)),
            default_refresh_interval=_env_int("OFSD_DEFAULT_REFRESH_INTERVAL", defaults.default_refresh_interval),
            min_refresh_interval=max(1, _env_int("OFSD_MIN_REFRESH_INTERVAL", defaults.min_refresh_interval)),
            log_level=_env_log_level("OFSD_LOG_LEVEL", defaults.log_level),
            log_file=get_config("OFSD_LOG_FILE") or None,
        )
