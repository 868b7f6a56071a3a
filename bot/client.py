"""
Discord bot client - event handling and command routing.

Business logic is delegated to the command service held by BotState; the
modules package parses commands and renders replies.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

import discord

from core.config import Settings
from core.user_directory import UserDirectory
from core.utils import safe_int
from modules.admins import handle_add_admin_command, handle_list_admins_command, handle_remove_admin_command
from modules.fortune import handle_draw_command, handle_history_command
from modules.help import handle_mention
from modules.reactions import (
    handle_custom_response,
    handle_delete_command,
    handle_list_command,
    handle_register_command,
)
from modules.replies import reply_failure
from web.server import HealthServer

from .state import BotState

logger = logging.getLogger("omikuji")

CommandHandler = Callable[[discord.Message], Awaitable[bool]]


class OmikujiBot(discord.Client):
    """
    Main Discord bot client.

    Handles:
    - startup (loading persisted state, health server)
    - message routing to the command modules
    """

    def __init__(self, settings: Settings, state: Optional[BotState] = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        super().__init__(intents=intents)

        self.settings = settings
        self.state = state or BotState(settings)
        self.users = UserDirectory(self._fetch_display_name)
        self.health_server: Optional[HealthServer] = None
        self.ready_once = False
        self._handlers = self._build_handlers()

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    async def setup_hook(self) -> None:
        """Called once before connecting to the gateway."""
        await self.state.load()

        if self.settings.health_port is not None:
            self.health_server = HealthServer(
                self.state,
                host=self.settings.health_host,
                port=self.settings.health_port,
            )
            await self.health_server.start()

    async def on_ready(self) -> None:
        if not self.ready_once:
            logger.info("Bot ready as %s", self.user)
            self.ready_once = True

    async def close(self) -> None:
        if self.health_server:
            await self.health_server.stop()
        await super().close()

    # ─── Users ────────────────────────────────────────────────────────────────

    async def _fetch_display_name(self, user_id: str) -> Optional[str]:
        snowflake = safe_int(user_id)
        if snowflake is None:
            return None
        user = self.get_user(snowflake)
        if user is None:
            try:
                user = await self.fetch_user(snowflake)
            except discord.NotFound:
                return None
        return user.display_name

    # ─── Message Events ───────────────────────────────────────────────────────

    def _build_handlers(self) -> list[CommandHandler]:
        service = self.state.service
        users = self.users
        # Order matters: "おみくじ履歴" must be tried before custom responses.
        return [
            lambda m: handle_draw_command(m, service),
            lambda m: handle_history_command(m, service, users),
            lambda m: handle_register_command(m, service),
            lambda m: handle_delete_command(m, service),
            lambda m: handle_list_command(m, service),
            lambda m: handle_add_admin_command(m, service, users),
            lambda m: handle_remove_admin_command(m, service, users),
            lambda m: handle_list_admins_command(m, service, users),
        ]

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or message.guild is None:
            return

        logger.debug("Message %s in channel %s from %s", message.id, message.channel.id, message.author.id)
        try:
            await self.dispatch_message(message)
        except Exception:
            logger.exception("Failed to handle message %s in channel %s", message.id, message.channel.id)
            try:
                await reply_failure(message, "処理中にエラーが発生しました。")
            except discord.HTTPException as e:
                logger.warning("Failed to send error reply: %s", e)

    async def dispatch_message(self, message: discord.Message) -> bool:
        """Route a message; returns True when something handled it."""
        for handler in self._handlers:
            if await handler(message):
                return True
        if self.user is not None and await handle_mention(message, self.state.service, self.user):
            return True
        return await handle_custom_response(message, self.state.service)
