"""
Admin storage - per-channel admin registry.

Each channel keeps its own set of admin user ids. One fixed admin is always
authorized everywhere and is never stored.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List

from .constants import CHANNELS
from .errors import AlreadyExistsError, NotFoundError, PersistenceError, ProtectedEntityError
from .io_utils import NOT_FOUND, read_json, write_json_atomic

logger = logging.getLogger("omikuji.admins")

# dict keys keep insertion order, so a dict with None values is an ordered set
AdminSet = Dict[str, None]


class AdminStore:
    """Channel id -> admin set, persisted as one document."""

    def __init__(self, path: Path, fixed_admin_id: str) -> None:
        self.path = path
        self.fixed_admin_id = fixed_admin_id
        self._channels: Dict[str, AdminSet] = {}
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        """
        Load the registry from disk.

        A missing file is created immediately so the first run leaves a
        document behind. Failing to create it is fatal for startup.
        """
        async with self._lock:
            data = await read_json(self.path)
            if data is NOT_FOUND:
                self._channels = {}
                await self._write(self._channels)
                logger.info("Created admin registry at %s", self.path)
                return
            self._channels = self._parse(data)
            logger.info("Loaded admin registry (%d channel(s))", len(self._channels))

    @staticmethod
    def _parse(data: Any) -> Dict[str, AdminSet]:
        if not isinstance(data, dict):
            raise PersistenceError("Admin registry must be a JSON object")
        raw = data.get(CHANNELS) or {}
        if not isinstance(raw, dict):
            raise PersistenceError("Admin registry 'channels' must be an object")
        channels: Dict[str, AdminSet] = {}
        for channel_id, members in raw.items():
            if not isinstance(members, list):
                continue
            admins: AdminSet = dict.fromkeys(str(m) for m in members if m is not None)
            if admins:
                channels[str(channel_id)] = admins
        return channels

    def _document(self, channels: Dict[str, AdminSet]) -> Dict[str, Any]:
        return {
            CHANNELS: {
                channel_id: list(admins)
                for channel_id, admins in channels.items()
                if admins
            }
        }

    async def _write(self, channels: Dict[str, AdminSet]) -> None:
        await write_json_atomic(self.path, self._document(channels))

    def _copy(self) -> Dict[str, AdminSet]:
        return {channel_id: dict(admins) for channel_id, admins in self._channels.items()}

    # ─── Reads ────────────────────────────────────────────────────────────────

    def is_admin(self, channel_id: str, user_id: str) -> bool:
        if user_id == self.fixed_admin_id:
            return True
        return user_id in self._channels.get(channel_id, {})

    def initialize_channel(self, channel_id: str) -> None:
        """Ensure an in-memory admin set exists; empty sets are never saved."""
        self._channels.setdefault(channel_id, {})

    def list_admins(self, channel_id: str) -> List[str]:
        return [self.fixed_admin_id, *self._channels.get(channel_id, {})]

    def channel_admins(self, channel_id: str) -> List[str]:
        return list(self._channels.get(channel_id, {}))

    # ─── Mutations ────────────────────────────────────────────────────────────

    async def add_admin(self, channel_id: str, user_id: str) -> None:
        async with self._lock:
            if user_id == self.fixed_admin_id or user_id in self._channels.get(channel_id, {}):
                raise AlreadyExistsError(
                    f"{user_id} is already an admin of {channel_id}",
                    channel_id=channel_id,
                    user_id=user_id,
                )
            channels = self._copy()
            channels.setdefault(channel_id, {})[user_id] = None
            await self._write(channels)
            self._channels = channels
        logger.info("Added admin %s to channel %s", user_id, channel_id)

    async def remove_admin(self, channel_id: str, user_id: str) -> None:
        async with self._lock:
            if user_id == self.fixed_admin_id:
                raise ProtectedEntityError(
                    "The fixed admin cannot be removed",
                    channel_id=channel_id,
                    user_id=user_id,
                )
            if user_id not in self._channels.get(channel_id, {}):
                raise NotFoundError(
                    f"{user_id} is not an admin of {channel_id}",
                    channel_id=channel_id,
                    user_id=user_id,
                )
            channels = self._copy()
            admins = channels[channel_id]
            del admins[user_id]
            if not admins:
                del channels[channel_id]
            await self._write(channels)
            self._channels = channels
        logger.info("Removed admin %s from channel %s", user_id, channel_id)
