"""
Reply builders shared by the command modules.
"""
from __future__ import annotations

import discord

from core.utils import mention

SUCCESS_COLOR = 0x57F287
ERROR_COLOR = 0xED4245
INFO_COLOR = 0x5865F2

NO_MENTIONS = discord.AllowedMentions.none()

# Discord rejects plain messages longer than this.
MESSAGE_LIMIT = 2000


def error_embed(text: str) -> discord.Embed:
    return discord.Embed(description=f"{text} :x:", color=ERROR_COLOR)


def success_embed(title: str, text: str) -> discord.Embed:
    return discord.Embed(title=title, description=text, color=SUCCESS_COLOR)


def info_embed(title: str, text: str, footer: str = "") -> discord.Embed:
    embed = discord.Embed(title=title, description=text, color=INFO_COLOR)
    if footer:
        embed.set_footer(text=footer)
    return embed


def admin_only_embed(user_id: str) -> discord.Embed:
    return discord.Embed(
        description=f"{mention(user_id)}さん、このコマンドは管理者専用です。 :lock:",
        color=ERROR_COLOR,
    )


async def reply(message: discord.Message, embed: discord.Embed) -> None:
    await message.channel.send(embed=embed, allowed_mentions=NO_MENTIONS)


async def reply_failure(message: discord.Message, text: str) -> None:
    await reply(message, error_embed(text))
