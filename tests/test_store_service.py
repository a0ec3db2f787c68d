"""
tests/test_store_service.py — Store Client Tests
=================================================
Covers the user_progress and guild_welcome queries, including the
atomic increment used for activity counting.

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from tally.database.models import UserProgress, WelcomeConfig
from tally.engine.progression import ProgressState
from tally.errors import StoreUnavailable
from tally.services import store_service
from tally.services.store_service import WelcomeSettings


def run_async(coro):
    """Run an async coroutine to completion."""
    return asyncio.run(coro)


class TestUserProgressQueries:
    def test_missing_user_returns_none(self, db_engine):
        assert store_service.get_user_progress(db_engine, 42) is None

    def test_insert_then_read(self, db_engine):
        assert store_service.insert_user_progress(db_engine, 42, 1, 1) is True
        assert store_service.get_user_progress(db_engine, 42) == ProgressState(point=1, level=1)

    def test_duplicate_insert_reports_false(self, db_engine):
        store_service.insert_user_progress(db_engine, 42, 1, 1)
        assert store_service.insert_user_progress(db_engine, 42, 5, 3) is False
        # Original row untouched
        assert store_service.get_user_progress(db_engine, 42) == ProgressState(point=1, level=1)

    def test_unconditional_update(self, db_engine):
        store_service.insert_user_progress(db_engine, 42, 1, 1)
        assert store_service.update_user_progress(db_engine, 42, 7, 2) is True
        assert store_service.get_user_progress(db_engine, 42) == ProgressState(point=7, level=2)

    def test_update_missing_user_reports_false(self, db_engine):
        assert store_service.update_user_progress(db_engine, 42, 7, 2) is False

    def test_increment_existing_row(self, db_engine):
        store_service.insert_user_progress(db_engine, 42, 3, 2)

        state, created = store_service.increment_user_progress(db_engine, 42)

        assert (state, created) == (ProgressState(point=4, level=2), False)
        assert store_service.get_user_progress(db_engine, 42) == ProgressState(point=4, level=2)

    def test_increment_crosses_threshold(self, db_engine):
        store_service.insert_user_progress(db_engine, 42, 19, 2)

        state, _ = store_service.increment_user_progress(db_engine, 42)

        assert state == ProgressState(point=0, level=3)

    def test_increment_honours_step(self, db_engine):
        store_service.insert_user_progress(db_engine, 42, 4, 1)
        state, _ = store_service.increment_user_progress(db_engine, 42, step=5)
        assert state == ProgressState(point=0, level=2)

    def test_increment_missing_row_inserts(self, db_engine):
        state, created = store_service.increment_user_progress(
            db_engine, 42, first_activity_points=0
        )

        assert created is True
        assert state == ProgressState(point=0, level=1)
        assert store_service.get_user_progress(db_engine, 42) == ProgressState(point=0, level=1)

    def test_increment_after_lost_insert_race(self, db_engine):
        """Another handler created the row between our UPDATE and INSERT."""
        real_insert = store_service.insert_user_progress

        def insert_loses(engine, user_id, point, level):
            real_insert(engine, user_id, point, level)
            return real_insert(engine, user_id, point, level)

        with patch.object(store_service, "insert_user_progress", insert_loses):
            state, created = store_service.increment_user_progress(db_engine, 42)

        assert created is False
        assert state == ProgressState(point=2, level=1)

    def test_check_constraint_rejects_negative_points(self, db_engine):
        with Session(db_engine) as session:
            session.add(UserProgress(user_id=1, point=-1, level=1))
            with pytest.raises(IntegrityError):
                session.commit()


class TestWelcomeQueries:
    def test_missing_guild_returns_none(self, db_engine):
        assert store_service.get_welcome_config(db_engine, 100) is None

    def test_set_and_get(self, db_engine):
        store_service.set_welcome_config(db_engine, 100, 555, "Hi!")
        assert store_service.get_welcome_config(db_engine, 100) == WelcomeSettings(
            guild_id=100, channel_id=555, message="Hi!"
        )

    def test_set_overwrites(self, db_engine):
        store_service.set_welcome_config(db_engine, 100, 555, "Hi!")
        store_service.set_welcome_config(db_engine, 100, 666, "Hello!")

        with Session(db_engine) as session:
            rows = session.query(WelcomeConfig).all()
            assert len(rows) == 1
            assert rows[0].channel_id == 666
            assert rows[0].message == "Hello!"


class TestStoreClient:
    def test_async_round_trip(self, store):
        async def scenario():
            assert await store.get_user_progress(7) is None
            assert await store.insert_user_progress(7, 1, 1)
            assert await store.update_user_progress(7, 2, 1)
            state, created = await store.increment_user_progress(7)
            assert not created
            assert state == ProgressState(point=3, level=1)
            return await store.get_user_progress(7)

        assert run_async(scenario()) == ProgressState(point=3, level=1)

    def test_welcome_round_trip(self, store):
        async def scenario():
            await store.set_welcome_config(100, 555, "Welcome!")
            return await store.get_welcome_config(100)

        settings = run_async(scenario())
        assert settings.channel_id == 555
        assert settings.message == "Welcome!"

    def test_driver_errors_become_store_unavailable(self, store):
        boom = OperationalError("SELECT 1", {}, Exception("connection refused"))

        def unreachable(engine, user_id):
            raise boom

        with patch.object(store_service, "get_user_progress", unreachable):
            with pytest.raises(StoreUnavailable) as exc_info:
                run_async(store.get_user_progress(7))
        assert exc_info.value.__cause__ is boom
