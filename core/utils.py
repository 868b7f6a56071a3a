"""
General utility functions.

Provides date/time helpers for the daily ledger, text sanitization and
user-reference parsing.
"""
from __future__ import annotations

import datetime as dt
import re
from typing import Any, Callable, Optional

UTC = dt.timezone.utc

# Tab and newline are kept.
CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
USER_REF_RE = re.compile(r"^<@!?(\d+)>$|^(\d+)$")

Clock = Callable[[], dt.datetime]


def utcnow() -> dt.datetime:
    return dt.datetime.now(tz=UTC)


def local_now(tz: dt.tzinfo, clock: Optional[Clock] = None) -> dt.datetime:
    moment = (clock or utcnow)()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz)


def day_key(moment: dt.datetime) -> str:
    # Unpadded on purpose: existing history files use "2024-3-7".
    return f"{moment.year}-{moment.month}-{moment.day}"


def time_string(moment: dt.datetime) -> str:
    return moment.strftime("%H:%M:%S")


def sanitize_text(text: Any, max_len: int = 1500) -> str:
    if text is None:
        return ""
    text = str(text)
    text = CONTROL_RE.sub("", text)
    text = text.replace("@everyone", "@\u200beveryone").replace("@here", "@\u200bhere")
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    return text


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdigit():
            return int(stripped)
    return default


def parse_user_ref(value: str) -> Optional[str]:
    """Accept `<@123>`, `<@!123>` or a bare snowflake and return the id."""
    match = USER_REF_RE.match(value.strip())
    if not match:
        return None
    return match.group(1) or match.group(2)


def mention(user_id: str) -> str:
    return f"<@{user_id}>"
