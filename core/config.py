"""
Process configuration.

Settings are read from the environment once at startup (main.py loads `.env`
first) and validated into a frozen dataclass.
"""
from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import EnvKey
from .paths import (
    ADMINS_FILENAME,
    DEFAULT_DATA_DIR,
    DRAWS_FILENAME,
    REACTIONS_FILENAME,
    resolve_repo_path,
)

DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HEALTH_HOST = "0.0.0.0"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    token: Optional[str]
    # Always authorized in every channel; never written to the admin registry.
    fixed_admin_id: str
    data_dir: Path = DEFAULT_DATA_DIR
    timezone: dt.tzinfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIMEZONE))
    log_level: str = DEFAULT_LOG_LEVEL
    health_host: str = DEFAULT_HEALTH_HOST
    health_port: Optional[int] = None

    @property
    def admins_path(self) -> Path:
        return self.data_dir / ADMINS_FILENAME

    @property
    def reactions_path(self) -> Path:
        return self.data_dir / REACTIONS_FILENAME

    @property
    def draws_path(self) -> Path:
        return self.data_dir / DRAWS_FILENAME


def _load_timezone(name: str) -> dt.tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"{EnvKey.TIMEZONE} is not a known time zone: {name!r}") from exc


def _parse_port(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    value = raw.strip()
    if not value.isdigit() or not 0 < int(value) < 65536:
        raise ConfigError(f"{EnvKey.HEALTH_PORT} must be a port number, got {raw!r}")
    return int(value)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env

    token = env.get(EnvKey.BOT_TOKEN) or env.get(EnvKey.BOT_TOKEN_FALLBACK)

    fixed_admin = (env.get(EnvKey.FIXED_ADMIN_ID) or "").strip()
    if not fixed_admin:
        raise ConfigError(f"{EnvKey.FIXED_ADMIN_ID} must be set to the super-admin's user id")

    data_dir_raw = env.get(EnvKey.DATA_DIR)
    data_dir = resolve_repo_path(data_dir_raw) if data_dir_raw else DEFAULT_DATA_DIR

    log_level = (env.get(EnvKey.LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()

    return Settings(
        token=token,
        fixed_admin_id=fixed_admin,
        data_dir=data_dir,
        timezone=_load_timezone(env.get(EnvKey.TIMEZONE) or DEFAULT_TIMEZONE),
        log_level=log_level,
        health_host=env.get(EnvKey.HEALTH_HOST) or DEFAULT_HEALTH_HOST,
        health_port=_parse_port(env.get(EnvKey.HEALTH_PORT)),
    )
