"""
Admin registry commands: add, remove and list channel admins.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

import discord

from core.errors import AlreadyExistsError, NotFoundError, PermissionDeniedError, PersistenceError, ProtectedEntityError
from core.help_system import help_system
from core.user_directory import UserDirectory
from core.utils import parse_user_ref
from modules.replies import admin_only_embed, info_embed, reply, reply_failure, success_embed
from services.command_service import CommandService

logger = logging.getLogger("omikuji.admins")

help_system.register_module(
    name="管理者",
    description="チャンネルごとの管理者設定",
    commands=[
        ("管理者追加 @ユーザー", "新しい管理者を追加", True),
        ("管理者削除 @ユーザー", "管理者を削除", True),
        ("管理者一覧", "現在の管理者一覧を表示", True),
    ],
)

ADD_PATTERN = re.compile(r"^管理者追加\s+(\S+)$")
REMOVE_PATTERN = re.compile(r"^管理者削除\s+(\S+)$")
LIST_PATTERN = re.compile(r"^管理者一覧$")


def parse_target(pattern: re.Pattern[str], content: str) -> Tuple[bool, Optional[str]]:
    """
    Returns (matched, user_id). user_id is None when the command matched but
    the argument is not a user mention or id.
    """
    match = pattern.match(content.strip())
    if not match:
        return False, None
    return True, parse_user_ref(match.group(1))


async def format_admin_list(admin_ids: List[str], fixed_admin_id: str, users: UserDirectory) -> str:
    lines = []
    for admin_id in admin_ids:
        name = await users.display_name(admin_id)
        suffix = " [固定管理者]" if admin_id == fixed_admin_id else ""
        lines.append(f"• {name} ({admin_id}){suffix}")
    return "\n".join(lines)


async def handle_add_admin_command(
    message: discord.Message,
    service: CommandService,
    users: UserDirectory,
) -> bool:
    matched, target_id = parse_target(ADD_PATTERN, message.content)
    if not matched:
        return False

    channel_id = str(message.channel.id)
    actor_id = str(message.author.id)
    if not service.is_admin(channel_id, actor_id):
        await reply(message, admin_only_embed(actor_id))
        return True
    if target_id is None:
        await reply_failure(message, "ユーザーを `@メンション` またはユーザーIDで指定してください。")
        return True

    if target_id == service.admins.fixed_admin_id:
        await reply_failure(message, "指定されたユーザーは固定管理者のため、追加できません。")
        return True

    name = await users.lookup(target_id)
    if name is None:
        await reply_failure(message, f"指定されたユーザーID `{target_id}` は存在しません。")
        return True

    try:
        admin_ids = await service.handle_add_admin(channel_id, actor_id, target_id)
    except AlreadyExistsError:
        await reply_failure(message, f"{name}さんは既にこのチャンネルの管理者です。")
        return True
    except PermissionDeniedError:
        await reply(message, admin_only_embed(actor_id))
        return True
    except PersistenceError:
        logger.exception("Failed to add admin %s in channel %s", target_id, channel_id)
        await reply_failure(message, "管理者の追加中にエラーが発生しました。")
        return True

    admin_list = await format_admin_list(admin_ids, service.admins.fixed_admin_id, users)
    await reply(
        message,
        success_embed(
            "✅ 管理者を追加しました",
            f"{name}さんをこのチャンネルの管理者に追加しました。\n\n"
            f"*チャンネル:* <#{channel_id}>\n\n*現在の管理者一覧:*\n{admin_list}",
        ),
    )
    return True


async def handle_remove_admin_command(
    message: discord.Message,
    service: CommandService,
    users: UserDirectory,
) -> bool:
    matched, target_id = parse_target(REMOVE_PATTERN, message.content)
    if not matched:
        return False

    channel_id = str(message.channel.id)
    actor_id = str(message.author.id)
    if target_id is None:
        if not service.is_admin(channel_id, actor_id):
            await reply(message, admin_only_embed(actor_id))
        else:
            await reply_failure(message, "ユーザーを `@メンション` またはユーザーIDで指定してください。")
        return True

    try:
        admin_ids = await service.handle_remove_admin(channel_id, actor_id, target_id)
    except PermissionDeniedError:
        await reply(message, admin_only_embed(actor_id))
        return True
    except ProtectedEntityError:
        await reply_failure(message, "固定管理者は削除できません。")
        return True
    except NotFoundError:
        name = await users.display_name(target_id)
        await reply_failure(message, f"{name}さんはこのチャンネルの管理者ではありません。")
        return True
    except PersistenceError:
        logger.exception("Failed to remove admin %s in channel %s", target_id, channel_id)
        await reply_failure(message, "管理者の削除中にエラーが発生しました。")
        return True

    name = await users.display_name(target_id)
    admin_list = await format_admin_list(admin_ids, service.admins.fixed_admin_id, users)
    await reply(
        message,
        success_embed(
            "✅ 管理者を削除しました",
            f"{name}さんをこのチャンネルの管理者から削除しました。\n\n"
            f"*チャンネル:* <#{channel_id}>\n\n*現在の管理者一覧:*\n{admin_list}",
        ),
    )
    return True


async def handle_list_admins_command(
    message: discord.Message,
    service: CommandService,
    users: UserDirectory,
) -> bool:
    if not LIST_PATTERN.match(message.content.strip()):
        return False

    channel_id = str(message.channel.id)
    try:
        admin_ids = service.handle_list_admins(channel_id, str(message.author.id))
    except PermissionDeniedError:
        await reply(message, admin_only_embed(str(message.author.id)))
        return True

    admin_list = await format_admin_list(admin_ids, service.admins.fixed_admin_id, users)
    await reply(
        message,
        info_embed(
            "👥 管理者一覧",
            f"*チャンネル:* <#{channel_id}>\n\n{admin_list}",
            footer=f"合計: {len(admin_ids)}名",
        ),
    )
    return True
