"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from tally.database.models import Base
from tally.services.store_service import StoreClient


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Tally tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def store(db_engine: Engine) -> StoreClient:
    return StoreClient(db_engine)


@pytest.fixture
def gateway() -> MagicMock:
    """A stand-in for DiscordGateway that records outbound calls."""
    gw = MagicMock()
    gw.send_message = AsyncMock()
    gw.reply_to = AsyncMock()
    gw.resolve_channel = AsyncMock(return_value=None)
    return gw


def make_message(
    content: str = "hello there",
    *,
    user_id: int = 1000,
    bot: bool = False,
    message_id: int = 1,
    name: str = "alice",
) -> SimpleNamespace:
    """Build a minimal object shaped like a discord.Message."""
    author = SimpleNamespace(id=user_id, bot=bot, name=name, mention=f"<@{user_id}>")
    return SimpleNamespace(id=message_id, content=content, author=author)


def make_member(
    member_id: int = 2000,
    *,
    guild_id: int = 100,
    guild_name: str = "Test Guild",
) -> SimpleNamespace:
    """Build a minimal object shaped like a discord.Member."""
    guild = SimpleNamespace(id=guild_id, name=guild_name)
    return SimpleNamespace(id=member_id, mention=f"<@{member_id}>", guild=guild, bot=False)


@pytest.fixture
def file_db_engine(tmp_path) -> Engine:
    """A file-backed SQLite engine with a real connection pool.

    Unlike ``db_engine``, worker threads get separate connections, so
    concurrent writes contend on the database lock as they would in
    production.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'tally.db'}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()
