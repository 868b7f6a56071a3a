"""
Bot state - the three stores and the command service built on them.

Kept apart from the Discord client so it can be loaded and exercised
without a gateway connection.
"""
from __future__ import annotations

import logging
import random
from typing import Optional

from core.admin_storage import AdminStore
from core.config import Settings
from core.fortune_storage import FortuneStore
from core.reaction_storage import ReactionStore
from core.utils import Clock
from services.command_service import CommandService

logger = logging.getLogger("omikuji.state")


class BotState:
    def __init__(
        self,
        settings: Settings,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings
        self.admins = AdminStore(settings.admins_path, settings.fixed_admin_id)
        self.reactions = ReactionStore(settings.reactions_path)
        self.fortunes = FortuneStore(settings.draws_path, settings.timezone, clock=clock, rng=rng)
        self.service = CommandService(self.admins, self.reactions, self.fortunes)

    async def load(self) -> None:
        """
        Load all documents. PersistenceError propagates: the admin registry
        has to exist before the bot can authorize anything.
        """
        await self.admins.load()
        await self.reactions.load()
        await self.fortunes.load()
        logger.info("State loaded from %s", self.settings.data_dir)
