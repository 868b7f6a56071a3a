"""
Tests for the health-check server.
"""
from __future__ import annotations

import pytest
from aiohttp import test_utils

from bot.state import BotState
from core.config import Settings
from core.constants import MatchMode
from tests.conftest import FIXED_ADMIN, TOKYO
from web.server import HEALTH_TEXT, HealthServer


@pytest.fixture
def state(data_dir, clock, rng) -> BotState:
    settings = Settings(token=None, fixed_admin_id=FIXED_ADMIN, data_dir=data_dir, timezone=TOKYO)
    return BotState(settings, clock=clock, rng=rng)


class TestHealthServer:
    """HTTP routes."""

    @pytest.mark.asyncio
    async def test_health_check(self, state):
        server = HealthServer(state)
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.get("/health-check")
            assert response.status == 200
            assert await response.text() == HEALTH_TEXT

    @pytest.mark.asyncio
    async def test_stats(self, state):
        await state.load()
        await state.service.handle_register("C1", "U1", "ping", "pong", MatchMode.PARTIAL)

        server = HealthServer(state)
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.get("/stats")
            assert response.status == 200
            assert await response.json() == {"channels": {"C1": 1}}


class TestBotState:
    """Startup loading."""

    @pytest.mark.asyncio
    async def test_load_creates_admin_registry(self, state):
        await state.load()
        assert state.admins.path.exists()
        assert state.service.is_admin("C1", FIXED_ADMIN)
