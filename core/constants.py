"""
Shared constants.

Persisted tokens live here so the stores, the command service and the
command parser agree on a single spelling.
"""
from __future__ import annotations

from typing import Optional


class MatchMode:
    """Matching modes for custom responses, as stored in `matchType`."""
    EXACT = "完全"
    PARTIAL = "部分"

    ALL = (EXACT, PARTIAL)

    _ALIASES = {
        "exact": EXACT,
        "partial": PARTIAL,
        "完全一致": EXACT,
        "部分一致": PARTIAL,
    }

    @classmethod
    def is_valid(cls, value: object) -> bool:
        return isinstance(value, str) and value in cls.ALL

    @classmethod
    def normalize(cls, value: Optional[str]) -> Optional[str]:
        """Map user input to a canonical token, or None if unrecognised."""
        if value is None:
            return None
        raw = value.strip()
        if raw in cls.ALL:
            return raw
        return cls._ALIASES.get(raw.lower())


class EnvKey:
    """Environment variables read by core.config."""
    BOT_TOKEN = "DISCORD_BOT_TOKEN"
    BOT_TOKEN_FALLBACK = "BOT_TOKEN"
    FIXED_ADMIN_ID = "FIXED_ADMIN_ID"
    DATA_DIR = "DATA_DIR"
    TIMEZONE = "BOT_TIMEZONE"
    LOG_LEVEL = "LOG_LEVEL"
    HEALTH_HOST = "HEALTH_HOST"
    HEALTH_PORT = "HEALTH_PORT"


# Persisted document keys
CHANNELS = "channels"
