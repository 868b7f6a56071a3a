"""
Unit tests for ReactionStore.

Tests registration, exact-before-partial resolution, removal and the
persisted document.
"""
from __future__ import annotations

import asyncio
import json

import pytest

import core.reaction_storage as reaction_storage
from core.constants import MatchMode
from core.errors import InvalidMatchMode, PersistenceError, ValidationError
from core.reaction_storage import ReactionStore, TriggerEntry


class TestRegister:
    """Registering and overwriting triggers."""

    @pytest.mark.asyncio
    async def test_register_then_resolve(self, reaction_store):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)
        assert reaction_store.resolve("C1", "hello") == "world"

    @pytest.mark.asyncio
    async def test_register_overwrites_existing_trigger(self, reaction_store):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)
        await reaction_store.register("C1", "hello", "there", MatchMode.PARTIAL)

        assert reaction_store.list_all("C1") == [TriggerEntry("hello", "there", MatchMode.PARTIAL)]

    @pytest.mark.asyncio
    async def test_invalid_mode_is_rejected(self, reaction_store):
        with pytest.raises(InvalidMatchMode):
            await reaction_store.register("C1", "hello", "world", "fuzzy")
        assert not reaction_store.has("C1", "hello")

    @pytest.mark.asyncio
    async def test_invalid_mode_is_a_validation_error(self, reaction_store):
        with pytest.raises(ValidationError):
            await reaction_store.register("C1", "hello", "world", "")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("trigger,response", [("", "x"), ("   ", "x"), ("x", ""), ("x", "  ")])
    async def test_blank_fields_are_rejected(self, reaction_store, trigger, response):
        with pytest.raises(ValidationError):
            await reaction_store.register("C1", trigger, response, MatchMode.EXACT)

    @pytest.mark.asyncio
    async def test_channels_are_isolated(self, reaction_store):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)
        assert reaction_store.resolve("C2", "hello") is None
        assert reaction_store.list_all("C2") == []


class TestResolve:
    """Resolution order and matching rules."""

    @pytest.mark.asyncio
    async def test_exact_does_not_substring_match(self, reaction_store):
        await reaction_store.register("C1", "こんにちは", "やあ！", MatchMode.EXACT)

        assert reaction_store.resolve("C1", "こんにちは") == "やあ！"
        assert reaction_store.resolve("C1", "こんにちは、元気？") is None

    @pytest.mark.asyncio
    async def test_partial_matches_substring(self, reaction_store):
        await reaction_store.register("C1", "ping", "pong", MatchMode.PARTIAL)
        assert reaction_store.resolve("C1", "pingping") == "pong"

    @pytest.mark.asyncio
    async def test_exact_wins_over_partial(self, reaction_store):
        await reaction_store.register("C1", "ab", "R1", MatchMode.PARTIAL)
        await reaction_store.register("C1", "abc", "R2", MatchMode.EXACT)
        assert reaction_store.resolve("C1", "abc") == "R2"
        assert reaction_store.resolve("C1", "abcd") == "R1"

    @pytest.mark.asyncio
    async def test_first_registered_partial_wins(self, reaction_store):
        await reaction_store.register("C1", "cat", "first", MatchMode.PARTIAL)
        await reaction_store.register("C1", "dog", "second", MatchMode.PARTIAL)
        assert reaction_store.resolve("C1", "dog and cat") == "first"

    @pytest.mark.asyncio
    async def test_no_match_returns_none(self, reaction_store):
        await reaction_store.register("C1", "ping", "pong", MatchMode.PARTIAL)
        assert reaction_store.resolve("C1", "hello") is None


class TestUnregister:
    """Removing triggers."""

    @pytest.mark.asyncio
    async def test_unregister_removes_trigger(self, reaction_store):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)

        assert await reaction_store.unregister("C1", "hello") is True
        assert reaction_store.resolve("C1", "hello") is None

    @pytest.mark.asyncio
    async def test_unregister_is_idempotent(self, reaction_store):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)

        assert await reaction_store.unregister("C1", "hello") is True
        assert await reaction_store.unregister("C1", "hello") is False
        assert await reaction_store.unregister("C9", "nothing") is False

    @pytest.mark.asyncio
    async def test_emptied_channel_is_pruned(self, reaction_store):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)
        await reaction_store.unregister("C1", "hello")

        document = json.loads(reaction_store.path.read_text(encoding="utf-8"))
        assert document == {"channels": {}}
        assert reaction_store.channel_stats() == []


class TestPersistence:
    """Persisted document format and reloading."""

    @pytest.mark.asyncio
    async def test_missing_file_starts_empty_without_writing(self, reaction_store):
        assert reaction_store.list_all("C1") == []
        assert not reaction_store.path.exists()

    @pytest.mark.asyncio
    async def test_document_format(self, reaction_store):
        await reaction_store.register("C1", "ping", "pong", MatchMode.PARTIAL)

        document = json.loads(reaction_store.path.read_text(encoding="utf-8"))
        assert document == {"channels": {"C1": {"ping": {"response": "pong", "matchType": "部分"}}}}

    @pytest.mark.asyncio
    async def test_round_trip(self, reaction_store):
        await reaction_store.register("C1", "こんにちは", "やあ！", MatchMode.EXACT)
        await reaction_store.register("C1", "ping", "pong", MatchMode.PARTIAL)
        await reaction_store.register("C2", "bye", "see you", MatchMode.EXACT)

        reloaded = ReactionStore(reaction_store.path)
        await reloaded.load()

        assert reloaded.list_all("C1") == reaction_store.list_all("C1")
        assert reloaded.list_all("C2") == reaction_store.list_all("C2")

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self, data_dir):
        data_dir.mkdir(parents=True)
        path = data_dir / "reactions.json"
        path.write_text(
            json.dumps(
                {
                    "channels": {
                        "C1": {
                            "ok": {"response": "fine", "matchType": "完全"},
                            "bad-mode": {"response": "x", "matchType": "曖昧"},
                            "no-response": {"matchType": "部分"},
                        }
                    }
                }
            ),
            encoding="utf-8",
        )

        store = ReactionStore(path)
        await store.load()

        assert [entry.trigger for entry in store.list_all("C1")] == ["ok"]

    @pytest.mark.asyncio
    async def test_failed_save_keeps_previous_state(self, reaction_store, monkeypatch):
        await reaction_store.register("C1", "hello", "world", MatchMode.EXACT)

        async def failing_write(path, data):
            raise PersistenceError("disk full", path=str(path))

        monkeypatch.setattr(reaction_storage, "write_json_atomic", failing_write)

        with pytest.raises(PersistenceError):
            await reaction_store.register("C1", "hello", "changed", MatchMode.EXACT)
        with pytest.raises(PersistenceError):
            await reaction_store.unregister("C1", "hello")

        assert reaction_store.resolve("C1", "hello") == "world"

    @pytest.mark.asyncio
    async def test_concurrent_registrations_are_all_kept(self, reaction_store):
        await asyncio.gather(
            *(reaction_store.register("C1", f"t{i}", f"r{i}", MatchMode.EXACT) for i in range(20))
        )

        reloaded = ReactionStore(reaction_store.path)
        await reloaded.load()
        assert len(reloaded.list_all("C1")) == 20

    @pytest.mark.asyncio
    async def test_channel_stats(self, reaction_store):
        await reaction_store.register("C1", "a", "1", MatchMode.EXACT)
        await reaction_store.register("C1", "b", "2", MatchMode.PARTIAL)
        await reaction_store.register("C2", "c", "3", MatchMode.EXACT)

        assert dict(reaction_store.channel_stats()) == {"C1": 2, "C2": 1}
