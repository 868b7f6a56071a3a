"""
Fortune storage - the daily omikuji ledger.

Each channel keeps one record for the current day: who has drawn and an
ordered log of the day's draws. A record for any other day is stale. Stale
records are purged when the ledger loads and replaced wholesale on the next
draw in that channel; reads treat them as absent.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constants import CHANNELS
from .errors import PersistenceError
from .io_utils import NOT_FOUND, read_json, write_json_atomic
from .utils import Clock, day_key, local_now, time_string

logger = logging.getLogger("omikuji.fortune")

# (result, weight) in draw order. Weights sum to 100; the order fixes which
# roll in 1..100 lands on which result.
FORTUNE_TABLE: Tuple[Tuple[str, int], ...] = (
    (":自爆:自爆:自爆:", 5),
    ("大吉！！！", 10),
    ("吉！", 30),
    ("中吉！！", 20),
    ("小吉", 15),
    ("末吉", 10),
    ("凶", 8),
    ("大凶", 2),
)
FALLBACK_FORTUNE = "吉！"


def pick_fortune(roll: int, table: Sequence[Tuple[str, int]] = FORTUNE_TABLE) -> str:
    """Walk cumulative weights and return the first result covering `roll`."""
    cumulative = 0
    for result, weight in table:
        cumulative += weight
        if roll <= cumulative:
            return result
    return FALLBACK_FORTUNE


@dataclass(frozen=True)
class UserDraw:
    date: str
    fortune: str
    time: str

    def to_dict(self) -> Dict[str, str]:
        return {"date": self.date, "fortune": self.fortune, "time": self.time}


@dataclass(frozen=True)
class DrawLogEntry:
    date: str
    time: str
    user_id: str
    fortune: str

    def to_dict(self) -> Dict[str, str]:
        return {"date": self.date, "time": self.time, "userId": self.user_id, "fortune": self.fortune}


@dataclass
class DrawRecord:
    date: str
    users: Dict[str, UserDraw] = field(default_factory=dict)
    logs: List[DrawLogEntry] = field(default_factory=list)

    def copy(self) -> "DrawRecord":
        return DrawRecord(self.date, dict(self.users), list(self.logs))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "users": {user_id: draw.to_dict() for user_id, draw in self.users.items()},
            "logs": [entry.to_dict() for entry in self.logs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["DrawRecord"]:
        date = data.get("date")
        if not isinstance(date, str):
            return None
        users: Dict[str, UserDraw] = {}
        raw_users = data.get("users")
        if isinstance(raw_users, dict):
            for user_id, item in raw_users.items():
                if not isinstance(item, dict):
                    continue
                users[str(user_id)] = UserDraw(
                    date=str(item.get("date", "")),
                    fortune=str(item.get("fortune", "")),
                    time=str(item.get("time", "")),
                )
        logs: List[DrawLogEntry] = []
        raw_logs = data.get("logs")
        if isinstance(raw_logs, list):
            for item in raw_logs:
                if not isinstance(item, dict):
                    continue
                logs.append(
                    DrawLogEntry(
                        date=str(item.get("date", "")),
                        time=str(item.get("time", "")),
                        user_id=str(item.get("userId", "")),
                        fortune=str(item.get("fortune", "")),
                    )
                )
        return cls(date=date, users=users, logs=logs)


class FortuneStore:
    """Channel id -> today's DrawRecord, persisted as one document."""

    def __init__(
        self,
        path: Path,
        tz: dt.tzinfo,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.path = path
        self.tz = tz
        self._clock = clock
        self._rng = rng or random.Random()
        self._channels: Dict[str, DrawRecord] = {}
        self._lock = asyncio.Lock()

    def _now(self) -> dt.datetime:
        return local_now(self.tz, self._clock)

    def today_key(self) -> str:
        return day_key(self._now())

    async def load(self) -> None:
        async with self._lock:
            data = await read_json(self.path)
            if data is NOT_FOUND:
                self._channels = {}
                logger.info("No omikuji history at %s; starting empty", self.path)
                return
            self._channels = self._parse(data)
            logger.info("Loaded omikuji history for %d channel(s)", len(self._channels))
        try:
            await self.cleanup_stale()
        except PersistenceError:
            # Stale records already read as absent; the next draw rewrites them.
            logger.exception("Failed to save purged omikuji history")

    @staticmethod
    def _parse(data: Any) -> Dict[str, DrawRecord]:
        if not isinstance(data, dict):
            raise PersistenceError("Omikuji history must be a JSON object")
        raw = data.get(CHANNELS) or {}
        if not isinstance(raw, dict):
            raise PersistenceError("Omikuji history 'channels' must be an object")
        channels: Dict[str, DrawRecord] = {}
        for channel_id, item in raw.items():
            if not isinstance(item, dict):
                continue
            record = DrawRecord.from_dict(item)
            if record is not None:
                channels[str(channel_id)] = record
        return channels

    @staticmethod
    def _document(channels: Dict[str, DrawRecord]) -> Dict[str, Any]:
        return {CHANNELS: {channel_id: record.to_dict() for channel_id, record in channels.items()}}

    def _copy(self) -> Dict[str, DrawRecord]:
        return {channel_id: record.copy() for channel_id, record in self._channels.items()}

    async def cleanup_stale(self) -> bool:
        """
        Drop every record not dated today, and any foreign-day entries inside
        today's records. Persists only when something was removed.
        """
        async with self._lock:
            today = self.today_key()
            channels: Dict[str, DrawRecord] = {}
            changed = False
            for channel_id, record in self._channels.items():
                if record.date != today:
                    changed = True
                    continue
                users = {uid: d for uid, d in record.users.items() if d.date == today}
                logs = [entry for entry in record.logs if entry.date == today]
                if len(users) != len(record.users) or len(logs) != len(record.logs):
                    changed = True
                channels[channel_id] = DrawRecord(today, users, logs)
            if not changed:
                return False
            await write_json_atomic(self.path, self._document(channels))
            self._channels = channels
        logger.info("Purged stale omikuji history")
        return True

    # ─── Draw ─────────────────────────────────────────────────────────────────

    def draw(self) -> str:
        """Pick a fortune. Does not look at or touch stored state."""
        return pick_fortune(self._rng.randint(1, 100))

    def _todays_record(self, channel_id: str, today: str) -> Optional[DrawRecord]:
        record = self._channels.get(channel_id)
        if record is None or record.date != today:
            return None
        return record

    def has_drawn_today(self, channel_id: str, user_id: str) -> bool:
        today = self.today_key()
        record = self._todays_record(channel_id, today)
        if record is None:
            return False
        draw = record.users.get(user_id)
        return draw is not None and draw.date == today

    def todays_fortune(self, channel_id: str, user_id: str) -> Optional[str]:
        today = self.today_key()
        record = self._todays_record(channel_id, today)
        if record is None:
            return None
        draw = record.users.get(user_id)
        if draw is None or draw.date != today:
            return None
        return draw.fortune

    async def _record_locked(self, channel_id: str, user_id: str, fortune: str) -> DrawLogEntry:
        now = self._now()
        today = day_key(now)
        stamp = time_string(now)

        channels = self._copy()
        record = channels.get(channel_id)
        if record is None or record.date != today:
            record = DrawRecord(date=today)
            channels[channel_id] = record

        entry = DrawLogEntry(date=today, time=stamp, user_id=user_id, fortune=fortune)
        record.users[user_id] = UserDraw(date=today, fortune=fortune, time=stamp)
        record.logs.append(entry)

        await write_json_atomic(self.path, self._document(channels))
        self._channels = channels
        return entry

    async def record(self, channel_id: str, user_id: str, fortune: str) -> DrawLogEntry:
        """
        Record a draw for today.

        Does not check whether the user already drew; a second call overwrites
        the user's entry and appends another log line. Use draw_once for the
        gated flow.
        """
        async with self._lock:
            entry = await self._record_locked(channel_id, user_id, fortune)
        logger.info("Recorded omikuji %s for %s in channel %s", fortune, user_id, channel_id)
        return entry

    async def draw_once(self, channel_id: str, user_id: str) -> Tuple[str, bool]:
        """
        Check, draw and record under one lock.

        Returns (fortune, True) for a new draw, or (today's fortune, False)
        when the user has already drawn in this channel today.
        """
        async with self._lock:
            existing = self.todays_fortune(channel_id, user_id)
            if existing is not None:
                return existing, False
            fortune = self.draw()
            await self._record_locked(channel_id, user_id, fortune)
        logger.info("Recorded omikuji %s for %s in channel %s", fortune, user_id, channel_id)
        return fortune, True

    def history(self, channel_id: str) -> List[DrawLogEntry]:
        record = self._todays_record(channel_id, self.today_key())
        if record is None:
            return []
        return list(record.logs)
