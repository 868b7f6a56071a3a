"""
Mention handler: command help, and the admin command list by DM.
"""
from __future__ import annotations

import logging

import discord

from core.help_system import ADMIN_HELP_KEYWORD, help_system
from core.utils import mention
from modules.replies import NO_MENTIONS, info_embed, reply, reply_failure
from services.command_service import CommandService

logger = logging.getLogger("omikuji.help")


def is_bot_mentioned(message: discord.Message, bot_user: discord.abc.User) -> bool:
    return any(member.id == bot_user.id for member in message.mentions)


async def handle_mention(
    message: discord.Message,
    service: CommandService,
    bot_user: discord.abc.User,
) -> bool:
    if not is_bot_mentioned(message, bot_user):
        return False

    user_id = str(message.author.id)
    wants_admin_help = ADMIN_HELP_KEYWORD in message.content
    if wants_admin_help and service.is_admin(str(message.channel.id), user_id):
        try:
            await message.author.send(embed=help_system.get_admin_embed(), allowed_mentions=NO_MENTIONS)
        except discord.HTTPException as e:
            logger.warning("Failed to DM admin help to %s: %s", user_id, e)
            await reply_failure(message, f"{mention(user_id)}さん、DMの送信に失敗しました。")
            return True
        await reply(message, info_embed("", f"{mention(user_id)}さん、DMをご確認ください。 :envelope:"))
        return True

    await message.channel.send(embed=help_system.get_help_embed(mention(user_id)), allowed_mentions=NO_MENTIONS)
    return True
