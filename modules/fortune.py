"""
Omikuji commands: the daily draw and the admin-only history.
"""
from __future__ import annotations

import logging
import re

import discord

from core.errors import PermissionDeniedError, PersistenceError
from core.help_system import help_system
from core.user_directory import UserDirectory
from core.utils import mention
from modules.replies import admin_only_embed, info_embed, reply, reply_failure
from services.command_service import CommandService

logger = logging.getLogger("omikuji.fortune")

help_system.register_module(
    name="おみくじ",
    description="今日の運勢を占います",
    commands=[
        ("おみくじ", "今日の運勢を占います（1日1回まで）", False),
        ("おみくじ履歴", "今日のおみくじ結果一覧を表示", True),
    ],
)

DRAW_PATTERN = re.compile(r"^おみくじ$")
HISTORY_PATTERN = re.compile(r"^おみくじ履歴$")


async def handle_draw_command(message: discord.Message, service: CommandService) -> bool:
    if not DRAW_PATTERN.match(message.content.strip()):
        return False

    channel_id = str(message.channel.id)
    user_id = str(message.author.id)
    try:
        result = await service.handle_draw(channel_id, user_id)
    except PersistenceError:
        logger.exception("Failed to record omikuji for %s in channel %s", user_id, channel_id)
        await reply_failure(message, "おみくじの記録中にエラーが発生しました。")
        return True

    if result.already_drawn:
        await reply(
            message,
            info_embed(
                "おみくじ",
                f"{mention(user_id)}さん、今日はすでにおみくじを引いています。\n"
                "*また明日チャレンジしてください！* :pray:",
            ),
        )
        return True

    await reply(
        message,
        info_embed("おみくじ", f"{mention(user_id)}さんの運勢は...\n\n*{result.fortune}*"),
    )
    return True


async def handle_history_command(
    message: discord.Message,
    service: CommandService,
    users: UserDirectory,
) -> bool:
    if not HISTORY_PATTERN.match(message.content.strip()):
        return False

    channel_id = str(message.channel.id)
    try:
        logs = service.handle_history(channel_id, str(message.author.id))
    except PermissionDeniedError:
        await reply(message, admin_only_embed(str(message.author.id)))
        return True

    if not logs:
        await reply(
            message,
            info_embed("今日のおみくじ履歴", "今日はまだ誰もおみくじを引いていません :ghost:"),
        )
        return True

    names = await users.display_names(entry.user_id for entry in logs)
    lines = [
        f"• {entry.time} - {name} さん: *{entry.fortune}*"
        for entry, name in zip(logs, names)
    ]
    await reply(
        message,
        info_embed(
            "今日のおみくじ履歴 📝",
            f"*チャンネル:* <#{channel_id}>\n\n" + "\n".join(lines),
            footer=f"合計: {len(logs)}件",
        ),
    )
    return True
