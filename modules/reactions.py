"""
Custom response commands.

Registers, deletes and lists per-channel trigger -> response pairs, and
answers ordinary messages that match a registered trigger.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import discord

from core.constants import MatchMode
from core.errors import InvalidMatchMode, NotFoundError, PermissionDeniedError, PersistenceError, ValidationError
from core.help_system import help_system
from core.utils import sanitize_text
from modules.replies import (
    MESSAGE_LIMIT,
    NO_MENTIONS,
    admin_only_embed,
    error_embed,
    info_embed,
    reply,
    reply_failure,
    success_embed,
)
from services.command_service import CommandService

logger = logging.getLogger("omikuji.reactions")

help_system.register_module(
    name="カスタム応答",
    description="チャンネルごとの自動応答",
    commands=[
        ("反応登録 トリガー/応答", "新しい応答を登録（完全一致）", False),
        ("反応登録 トリガー(部分)/応答", "新しい応答を登録（部分一致）", False),
        ("反応登録 トリガー(完全)/応答", "新しい応答を登録（完全一致）", False),
        ("反応一覧", "登録されている応答の一覧を表示", False),
        ("反応削除 トリガー", "登録済みの応答を削除（管理者のみ）", True),
    ],
)

# Half- and full-width separators and brackets are both accepted.
REGISTER_WITH_MODE_PATTERN = re.compile(r"^反応登録\s+([^(（]+)[(（]([^)）]+)[)）]\s*[/／](.+)$", re.DOTALL)
REGISTER_PATTERN = re.compile(r"^反応登録\s+([^/／]+)[/／](.+)$", re.DOTALL)
DELETE_PATTERN = re.compile(r"^反応削除\s+(.+)$", re.DOTALL)
LIST_PATTERN = re.compile(r"^反応一覧$")


@dataclass(frozen=True)
class RegisterCommand:
    trigger: str
    response: str
    match_type: str
    explicit_mode: bool


def parse_register(content: str) -> Optional[RegisterCommand]:
    """
    Parse a register command.

    Unknown mode words are passed through untouched so the store can reject
    them with InvalidMatchMode.
    """
    text = content.strip()
    match = REGISTER_WITH_MODE_PATTERN.match(text)
    if match:
        raw_mode = match.group(2).strip()
        return RegisterCommand(
            trigger=match.group(1).strip(),
            response=match.group(3).strip(),
            match_type=MatchMode.normalize(raw_mode) or raw_mode,
            explicit_mode=True,
        )
    match = REGISTER_PATTERN.match(text)
    if match:
        return RegisterCommand(
            trigger=match.group(1).strip(),
            response=match.group(2).strip(),
            match_type=MatchMode.EXACT,
            explicit_mode=False,
        )
    return None


def parse_delete(content: str) -> Optional[str]:
    match = DELETE_PATTERN.match(content.strip())
    if not match:
        return None
    return match.group(1).strip()


async def handle_register_command(message: discord.Message, service: CommandService) -> bool:
    command = parse_register(message.content)
    if command is None:
        return False

    channel_id = str(message.channel.id)
    try:
        entry = await service.handle_register(
            channel_id,
            str(message.author.id),
            command.trigger,
            command.response,
            command.match_type,
        )
    except InvalidMatchMode:
        await reply_failure(
            message,
            f"マッチングタイプは「{MatchMode.PARTIAL}」または「{MatchMode.EXACT}」を指定してください。",
        )
        return True
    except ValidationError as e:
        await reply_failure(message, f"カスタム応答を登録できません: {e.message}")
        return True
    except PersistenceError:
        logger.exception("Failed to save response %r in channel %s", command.trigger, channel_id)
        await reply_failure(message, "カスタム応答の登録中にエラーが発生しました。")
        return True

    mode_label = entry.match_type if command.explicit_mode else f"{entry.match_type} (デフォルト)"
    await reply(
        message,
        success_embed(
            "✨ カスタム応答を登録しました",
            f"*トリガー:* `{entry.trigger}`\n"
            f"*マッチング:* {mode_label}\n"
            f"*応答:* {entry.response}\n"
            f"*チャンネル:* <#{channel_id}>",
        ),
    )
    return True


async def handle_delete_command(message: discord.Message, service: CommandService) -> bool:
    trigger = parse_delete(message.content)
    if trigger is None:
        return False

    channel_id = str(message.channel.id)
    try:
        await service.handle_delete(channel_id, str(message.author.id), trigger)
    except PermissionDeniedError:
        await reply(message, admin_only_embed(str(message.author.id)))
        return True
    except NotFoundError:
        await reply_failure(message, f"このチャンネルには「`{trigger}`」に対する応答は登録されていません。")
        return True
    except PersistenceError:
        logger.exception("Failed to delete response %r in channel %s", trigger, channel_id)
        await reply_failure(message, "カスタム応答の削除中にエラーが発生しました。")
        return True

    await reply(
        message,
        success_embed(
            "🗑️ カスタム応答を削除しました",
            f"トリガー「`{trigger}`」の応答を削除しました。\n*チャンネル:* <#{channel_id}>",
        ),
    )
    return True


async def handle_list_command(message: discord.Message, service: CommandService) -> bool:
    if not LIST_PATTERN.match(message.content.strip()):
        return False

    channel_id = str(message.channel.id)
    entries = service.handle_list(channel_id)
    if not entries:
        await reply(message, error_embed("このチャンネルには登録されているカスタム応答はありません。"))
        return True

    lines = [f"• `{e.trigger}` ({e.match_type}) → {e.response}" for e in entries]
    await reply(
        message,
        info_embed(
            "📝 カスタム応答一覧",
            f"*チャンネル:* <#{channel_id}>\n\n" + "\n".join(lines),
            footer=f"合計: {len(entries)}件",
        ),
    )
    return True


async def handle_custom_response(message: discord.Message, service: CommandService) -> bool:
    """Send the registered response for a message, if any trigger matches."""
    if not message.content:
        return False
    response = service.handle_resolve(str(message.channel.id), message.content)
    if response is None:
        return False
    await message.channel.send(sanitize_text(response, max_len=MESSAGE_LIMIT), allowed_mentions=NO_MENTIONS)
    return True
