"""
Command service - transport-independent command handling.

Every chat command ends up here with its fields already extracted. The
service applies the admin checks and calls into the stores; rendering the
result is left to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from core.admin_storage import AdminStore
from core.constants import MatchMode
from core.errors import NotFoundError, PermissionDeniedError
from core.fortune_storage import DrawLogEntry, FortuneStore
from core.reaction_storage import ReactionStore, TriggerEntry

logger = logging.getLogger("omikuji.commands")


@dataclass(frozen=True)
class DrawResult:
    fortune: str
    already_drawn: bool


class CommandService:
    def __init__(
        self,
        admins: AdminStore,
        reactions: ReactionStore,
        fortunes: FortuneStore,
    ) -> None:
        self.admins = admins
        self.reactions = reactions
        self.fortunes = fortunes

    def is_admin(self, channel_id: str, user_id: str) -> bool:
        return self.admins.is_admin(channel_id, user_id)

    def _require_admin(self, channel_id: str, user_id: str) -> None:
        if not self.admins.is_admin(channel_id, user_id):
            logger.info("Denied admin command for %s in channel %s", user_id, channel_id)
            raise PermissionDeniedError(
                "This command is for admins only",
                channel_id=channel_id,
                user_id=user_id,
            )

    # ─── Custom responses ─────────────────────────────────────────────────────

    async def handle_register(
        self,
        channel_id: str,
        user_id: str,
        trigger: str,
        response: str,
        match_type: str = MatchMode.EXACT,
    ) -> TriggerEntry:
        entry = await self.reactions.register(channel_id, trigger, response, match_type)
        logger.debug("Response %r registered by %s", trigger, user_id)
        return entry

    async def handle_delete(self, channel_id: str, user_id: str, trigger: str) -> None:
        self._require_admin(channel_id, user_id)
        if not await self.reactions.unregister(channel_id, trigger):
            raise NotFoundError(
                f"No response registered for {trigger!r}",
                channel_id=channel_id,
                trigger=trigger,
            )

    def handle_list(self, channel_id: str) -> List[TriggerEntry]:
        return self.reactions.list_all(channel_id)

    def handle_resolve(self, channel_id: str, text: str) -> Optional[str]:
        return self.reactions.resolve(channel_id, text.strip())

    # ─── Omikuji ──────────────────────────────────────────────────────────────

    async def handle_draw(self, channel_id: str, user_id: str) -> DrawResult:
        fortune, drawn = await self.fortunes.draw_once(channel_id, user_id)
        return DrawResult(fortune=fortune, already_drawn=not drawn)

    def handle_history(self, channel_id: str, user_id: str) -> List[DrawLogEntry]:
        self._require_admin(channel_id, user_id)
        return self.fortunes.history(channel_id)

    # ─── Admins ───────────────────────────────────────────────────────────────

    async def handle_add_admin(self, channel_id: str, actor_id: str, target_id: str) -> List[str]:
        self._require_admin(channel_id, actor_id)
        self.admins.initialize_channel(channel_id)
        await self.admins.add_admin(channel_id, target_id)
        return self.admins.list_admins(channel_id)

    async def handle_remove_admin(self, channel_id: str, actor_id: str, target_id: str) -> List[str]:
        self._require_admin(channel_id, actor_id)
        await self.admins.remove_admin(channel_id, target_id)
        return self.admins.list_admins(channel_id)

    def handle_list_admins(self, channel_id: str, actor_id: str) -> List[str]:
        self._require_admin(channel_id, actor_id)
        return self.admins.list_admins(channel_id)
