"""
Unit tests for chat command parsing.
"""
from __future__ import annotations

import pytest

from core.constants import MatchMode
from core.utils import mention, parse_user_ref, safe_int, sanitize_text
from modules.admins import ADD_PATTERN, REMOVE_PATTERN, parse_target
from modules.reactions import parse_delete, parse_register


class TestParseRegister:
    """反応登録 command forms."""

    def test_default_mode_is_exact(self):
        command = parse_register("反応登録 こんにちは/やあ！")

        assert command.trigger == "こんにちは"
        assert command.response == "やあ！"
        assert command.match_type == MatchMode.EXACT
        assert command.explicit_mode is False

    def test_explicit_partial_mode(self):
        command = parse_register("反応登録 ping(部分)/pong")

        assert command.trigger == "ping"
        assert command.match_type == MatchMode.PARTIAL
        assert command.explicit_mode is True

    def test_full_width_brackets_and_separator(self):
        command = parse_register("反応登録 おはよう（完全）／おはようございます")

        assert command.trigger == "おはよう"
        assert command.response == "おはようございます"
        assert command.match_type == MatchMode.EXACT

    def test_mode_aliases(self):
        assert parse_register("反応登録 a(partial)/b").match_type == MatchMode.PARTIAL
        assert parse_register("反応登録 a(完全一致)/b").match_type == MatchMode.EXACT

    def test_unknown_mode_is_passed_through(self):
        command = parse_register("反応登録 a(曖昧)/b")
        assert command.match_type == "曖昧"

    def test_response_may_contain_separator(self):
        command = parse_register("反応登録 url/https://example.com/a")
        assert command.trigger == "url"
        assert command.response == "https://example.com/a"

    @pytest.mark.parametrize("content", ["反応登録", "反応登録 only-trigger", "こんにちは", "反応一覧"])
    def test_non_matching_content(self, content):
        assert parse_register(content) is None


class TestParseDelete:
    """反応削除 command."""

    def test_trigger_is_extracted(self):
        assert parse_delete("反応削除 こんにちは ") == "こんにちは"

    def test_missing_trigger(self):
        assert parse_delete("反応削除") is None


class TestParseTarget:
    """Admin command targets."""

    def test_mention(self):
        assert parse_target(ADD_PATTERN, "管理者追加 <@123456>") == (True, "123456")

    def test_nickname_mention(self):
        assert parse_target(REMOVE_PATTERN, "管理者削除 <@!123456>") == (True, "123456")

    def test_bare_id(self):
        assert parse_target(ADD_PATTERN, "管理者追加 123456") == (True, "123456")

    def test_invalid_reference(self):
        assert parse_target(ADD_PATTERN, "管理者追加 someone") == (True, None)

    def test_other_command(self):
        assert parse_target(ADD_PATTERN, "管理者一覧") == (False, None)


class TestUtils:
    """Small text helpers."""

    def test_parse_user_ref(self):
        assert parse_user_ref("<@42>") == "42"
        assert parse_user_ref(" 42 ") == "42"
        assert parse_user_ref("<#42>") is None

    def test_mention(self):
        assert mention("42") == "<@42>"

    def test_safe_int(self):
        assert safe_int("42") == 42
        assert safe_int("abc") is None
        assert safe_int(True) is None

    def test_sanitize_text_neutralizes_mass_mentions(self):
        text = sanitize_text("hi @everyone and @here\x07")
        assert "@everyone" not in text
        assert "@here" not in text
        assert "\x07" not in text

    def test_sanitize_text_truncates(self):
        assert len(sanitize_text("a" * 2000)) == 1500

    def test_sanitize_text_keeps_line_breaks(self):
        assert sanitize_text("line1\nline2\tend\r") == "line1\nline2\tend"
