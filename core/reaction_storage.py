"""
Reaction storage - per-channel custom trigger -> response table.

Matching is exact-before-partial: an exact trigger equal to the whole
message always wins over any partial trigger contained in it. Within a pass,
entries are tried in registration order.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .constants import CHANNELS, MatchMode
from .errors import InvalidMatchMode, PersistenceError, ValidationError
from .io_utils import NOT_FOUND, read_json, write_json_atomic

logger = logging.getLogger("omikuji.reactions")


@dataclass(frozen=True)
class TriggerEntry:
    trigger: str
    response: str
    match_type: str

    def to_dict(self) -> Dict[str, str]:
        return {"response": self.response, "matchType": self.match_type}


ChannelTable = Dict[str, TriggerEntry]


class ReactionStore:
    """Channel id -> {trigger: TriggerEntry}, persisted as one document."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._channels: Dict[str, ChannelTable] = {}
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        async with self._lock:
            data = await read_json(self.path)
            if data is NOT_FOUND:
                self._channels = {}
                logger.info("No reaction table at %s; starting empty", self.path)
                return
            self._channels = self._parse(data)
            logger.info("Loaded custom responses for %d channel(s)", len(self._channels))

    @staticmethod
    def _parse(data: Any) -> Dict[str, ChannelTable]:
        if not isinstance(data, dict):
            raise PersistenceError("Reaction table must be a JSON object")
        raw = data.get(CHANNELS) or {}
        if not isinstance(raw, dict):
            raise PersistenceError("Reaction table 'channels' must be an object")
        channels: Dict[str, ChannelTable] = {}
        for channel_id, entries in raw.items():
            if not isinstance(entries, dict):
                continue
            table: ChannelTable = {}
            for trigger, config in entries.items():
                if not isinstance(config, dict):
                    continue
                response = config.get("response")
                match_type = config.get("matchType")
                if not trigger or not isinstance(response, str) or not MatchMode.is_valid(match_type):
                    logger.warning(
                        "Skipping malformed response %r in channel %s", trigger, channel_id
                    )
                    continue
                table[trigger] = TriggerEntry(trigger, response, match_type)
            if table:
                channels[str(channel_id)] = table
        return channels

    @staticmethod
    def _document(channels: Dict[str, ChannelTable]) -> Dict[str, Any]:
        return {
            CHANNELS: {
                channel_id: {trigger: entry.to_dict() for trigger, entry in table.items()}
                for channel_id, table in channels.items()
                if table
            }
        }

    def _copy(self) -> Dict[str, ChannelTable]:
        return {channel_id: dict(table) for channel_id, table in self._channels.items()}

    # ─── Mutations ────────────────────────────────────────────────────────────

    async def register(
        self,
        channel_id: str,
        trigger: str,
        response: str,
        match_type: str,
    ) -> TriggerEntry:
        """Add or overwrite a trigger for a channel."""
        if not MatchMode.is_valid(match_type):
            raise InvalidMatchMode(match_type)
        if not trigger or not trigger.strip():
            raise ValidationError("Trigger cannot be empty")
        if not response or not response.strip():
            raise ValidationError("Response cannot be empty")

        entry = TriggerEntry(trigger, response, match_type)
        async with self._lock:
            channels = self._copy()
            table = channels.setdefault(channel_id, {})
            replaced = trigger in table
            table[trigger] = entry
            await write_json_atomic(self.path, self._document(channels))
            self._channels = channels
        logger.info(
            "%s response %r (%s) in channel %s",
            "Updated" if replaced else "Registered",
            trigger,
            match_type,
            channel_id,
        )
        return entry

    async def unregister(self, channel_id: str, trigger: str) -> bool:
        async with self._lock:
            if trigger not in self._channels.get(channel_id, {}):
                return False
            channels = self._copy()
            table = channels[channel_id]
            del table[trigger]
            if not table:
                del channels[channel_id]
            await write_json_atomic(self.path, self._document(channels))
            self._channels = channels
        logger.info("Removed response %r from channel %s", trigger, channel_id)
        return True

    # ─── Reads ────────────────────────────────────────────────────────────────

    def has(self, channel_id: str, trigger: str) -> bool:
        return trigger in self._channels.get(channel_id, {})

    def resolve(self, channel_id: str, text: str) -> Optional[str]:
        table = self._channels.get(channel_id)
        if not table:
            return None

        for trigger, entry in table.items():
            if entry.match_type == MatchMode.EXACT and trigger == text:
                return entry.response

        for trigger, entry in table.items():
            if entry.match_type == MatchMode.PARTIAL and trigger in text:
                return entry.response

        return None

    def list_all(self, channel_id: str) -> List[TriggerEntry]:
        return list(self._channels.get(channel_id, {}).values())

    def channel_stats(self) -> List[Tuple[str, int]]:
        return [(channel_id, len(table)) for channel_id, table in self._channels.items()]
