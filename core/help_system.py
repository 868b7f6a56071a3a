"""
Help system - centralized help registration and display.

Each command module registers its commands on import. The mention handler
renders either the public overview or, for admins, the admin command list.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import discord

HELP_COLOR = 0x5865F2
ADMIN_HELP_KEYWORD = "管理者用"


@dataclass
class CommandHelp:
    usage: str
    description: str
    admin_only: bool = False

    def to_line(self) -> str:
        return f"• `{self.usage}` - {self.description}"


@dataclass
class ModuleHelp:
    """Help information for a single command module."""

    name: str
    description: str
    commands: list[CommandHelp] = field(default_factory=list)

    def lines(self, *, admin_only: bool) -> list[str]:
        return [cmd.to_line() for cmd in self.commands if cmd.admin_only == admin_only]


class HelpSystem:
    """
    Central help registry.

    Usage:
        help_system.register_module(
            name="おみくじ",
            description="今日の運勢を占います",
            commands=[("おみくじ", "今日の運勢を占います（1日1回まで）", False)],
        )
    """

    def __init__(self) -> None:
        self._modules: dict[str, ModuleHelp] = {}
        self._registered_order: list[str] = []

    def register_module(
        self,
        name: str,
        description: str,
        commands: Optional[list[tuple[str, str, bool]]] = None,
    ) -> None:
        if name not in self._modules:
            self._registered_order.append(name)
        self._modules[name] = ModuleHelp(
            name=name,
            description=description,
            commands=[CommandHelp(usage, desc, admin_only) for usage, desc, admin_only in commands or []],
        )

    def _modules_in_order(self) -> list[ModuleHelp]:
        return [self._modules[name] for name in self._registered_order if name in self._modules]

    def get_help_embed(self, user_mention: str) -> discord.Embed:
        """Public command overview shown when the bot is mentioned."""
        embed = discord.Embed(
            title="🎯 使用可能なコマンド",
            description=f"{user_mention}さん、以下のコマンドが使えます：",
            color=HELP_COLOR,
        )
        for module_help in self._modules_in_order():
            lines = module_help.lines(admin_only=False)
            if lines:
                embed.add_field(name=module_help.name, value="\n".join(lines), inline=False)
        embed.set_footer(
            text=f"💡 管理者用コマンドを確認するには「{ADMIN_HELP_KEYWORD}」と入力してください（管理者のみ）"
        )
        return embed

    def get_admin_embed(self) -> discord.Embed:
        """Admin command list, sent by DM."""
        embed = discord.Embed(
            title="👑 管理者用コマンド一覧",
            description="以下のコマンドが使用できます：",
            color=HELP_COLOR,
        )
        admin_lines: list[str] = []
        public_lines: list[str] = []
        for module_help in self._modules_in_order():
            admin_lines.extend(module_help.lines(admin_only=True))
            public_lines.extend(module_help.lines(admin_only=False))
        if admin_lines:
            embed.add_field(name="管理者専用コマンド", value="\n".join(admin_lines), inline=False)
        if public_lines:
            embed.add_field(name="一般コマンド", value="\n".join(public_lines), inline=False)
        embed.set_footer(text="⚠️ 管理者専用コマンドは管理者のみが使用できます")
        return embed


# Global singleton instance
help_system = HelpSystem()
