"""
Pytest configuration and fixtures for the omikuji bot tests.

Stores are built on a temporary data directory with a controllable clock and
a seeded random generator so draws and day boundaries are reproducible.
"""
from __future__ import annotations

import datetime as dt
import random
from pathlib import Path
from typing import AsyncGenerator
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio

from core.admin_storage import AdminStore
from core.fortune_storage import FortuneStore
from core.reaction_storage import ReactionStore
from services.command_service import CommandService

FIXED_ADMIN = "100000000000000001"
TOKYO = ZoneInfo("Asia/Tokyo")


class MutableClock:
    """Callable clock returning a settable UTC instant."""

    def __init__(self, now: dt.datetime) -> None:
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def set_local(self, *args: int) -> None:
        self.now = dt.datetime(*args, tzinfo=TOKYO).astimezone(dt.timezone.utc)

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


# ============================================================================
# BASIC FIXTURES
# ============================================================================


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def clock() -> MutableClock:
    # 2024-03-07 12:00:00 in Tokyo
    return MutableClock(dt.datetime(2024, 3, 7, 3, 0, 0, tzinfo=dt.timezone.utc))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20240307)


# ============================================================================
# STORE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def admin_store(data_dir: Path) -> AsyncGenerator[AdminStore, None]:
    store = AdminStore(data_dir / "admin_users.json", FIXED_ADMIN)
    await store.load()
    yield store


@pytest_asyncio.fixture
async def reaction_store(data_dir: Path) -> AsyncGenerator[ReactionStore, None]:
    store = ReactionStore(data_dir / "reactions.json")
    await store.load()
    yield store


@pytest_asyncio.fixture
async def fortune_store(
    data_dir: Path,
    clock: MutableClock,
    rng: random.Random,
) -> AsyncGenerator[FortuneStore, None]:
    store = FortuneStore(data_dir / "omikuji_history.json", TOKYO, clock=clock, rng=rng)
    await store.load()
    yield store


@pytest.fixture
def service(
    admin_store: AdminStore,
    reaction_store: ReactionStore,
    fortune_store: FortuneStore,
) -> CommandService:
    return CommandService(admin_store, reaction_store, fortune_store)
