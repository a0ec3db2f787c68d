"""
tally.services.store_service — Progress & Welcome Store
========================================================

Synchronous query functions (callable from scripts, the seeder and tests)
plus :class:`StoreClient`, the async facade the bot's services receive.
The client owns the engine; nothing else in the bot touches it.

Activity is counted with **one** conditional ``UPDATE … RETURNING``
(:func:`increment_user_progress`): the new point and level are computed by
the database from the row's current values, so overlapping handlers for the
same member serialize on the row lock instead of overwriting each other.
The first activity inserts the row; losing that insert race to another
handler falls back to the same atomic update.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy import Engine, case, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tally.constants import DEFAULT_LEVEL_STEP, points_for_level
from tally.database.engine import get_session, run_db
from tally.database.models import UserProgress, WelcomeConfig
from tally.engine.progression import ProgressState
from tally.errors import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class WelcomeSettings:
    """Detached copy of a ``guild_welcome`` row."""

    guild_id: int
    channel_id: int
    message: str


# ---------------------------------------------------------------------------
# user_progress
# ---------------------------------------------------------------------------
def get_user_progress(engine: Engine, user_id: int) -> ProgressState | None:
    """Return the member's current counter, or ``None`` if never seen."""
    with Session(engine) as session:
        row = session.get(UserProgress, user_id)
        if row is None:
            return None
        return ProgressState(point=row.point, level=row.level)


def insert_user_progress(engine: Engine, user_id: int, point: int, level: int) -> bool:
    """Create the member's row.  Returns ``False`` if it already exists."""
    with Session(engine) as session:
        session.add(UserProgress(user_id=user_id, point=point, level=level))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.debug("Progress row for user %d already exists", user_id)
            return False
    return True


def update_user_progress(engine: Engine, user_id: int, point: int, level: int) -> bool:
    """Overwrite the member's counter.  Returns ``True`` if a row was updated."""
    stmt = update(UserProgress).where(UserProgress.user_id == user_id)
    stmt = stmt.values(point=point, level=level).execution_options(
        synchronize_session=False
    )
    with get_session(engine) as session:
        result = session.execute(stmt)
        return result.rowcount > 0


def _increment_statement(user_id: int, step: int):
    """``UPDATE … RETURNING`` that applies one activity in the database.

    Both ``CASE`` branches read the row's pre-update values, so this is the
    same rule as :func:`tally.engine.progression.advance`, evaluated under
    the row lock.
    """
    bumped = UserProgress.point + 1
    crossed = bumped >= points_for_level(UserProgress.level, step)
    return (
        update(UserProgress)
        .where(UserProgress.user_id == user_id)
        .values(
            point=case((crossed, 0), else_=bumped),
            level=case((crossed, UserProgress.level + 1), else_=UserProgress.level),
        )
        .returning(UserProgress.point, UserProgress.level)
        .execution_options(synchronize_session=False)
    )


def increment_user_progress(
    engine: Engine,
    user_id: int,
    *,
    step: int = DEFAULT_LEVEL_STEP,
    first_activity_points: int = 1,
) -> tuple[ProgressState, bool]:
    """Count one activity for *user_id* atomically.

    Returns ``(new_state, created)``.  ``created`` is ``True`` only for the
    call that inserted the member's row.
    """
    stmt = _increment_statement(user_id, step)

    with get_session(engine) as session:
        row = session.execute(stmt).first()
    if row is not None:
        return ProgressState(point=row.point, level=row.level), False

    if insert_user_progress(engine, user_id, first_activity_points, 1):
        return ProgressState(point=first_activity_points, level=1), True

    # Another handler inserted the row between our UPDATE and INSERT.
    with get_session(engine) as session:
        row = session.execute(stmt).one()
    return ProgressState(point=row.point, level=row.level), False


# ---------------------------------------------------------------------------
# guild_welcome
# ---------------------------------------------------------------------------
def get_welcome_config(engine: Engine, guild_id: int) -> WelcomeSettings | None:
    """Return the guild's welcome settings, or ``None`` if not configured."""
    with Session(engine) as session:
        row = session.get(WelcomeConfig, guild_id)
        if row is None:
            return None
        return WelcomeSettings(
            guild_id=row.guild_id, channel_id=row.channel_id, message=row.message
        )


def set_welcome_config(engine: Engine, guild_id: int, channel_id: int, message: str) -> None:
    """Insert or replace the guild's welcome settings."""
    with get_session(engine) as session:
        row = session.get(WelcomeConfig, guild_id)
        if row is None:
            session.add(WelcomeConfig(guild_id=guild_id, channel_id=channel_id, message=message))
        else:
            row.channel_id = channel_id
            row.message = message


# ---------------------------------------------------------------------------
# Async facade
# ---------------------------------------------------------------------------
class StoreClient:
    """Async access to the store for event handlers.

    Each method runs its query on a worker thread via :func:`run_db` and
    converts driver errors into :class:`StoreUnavailable`.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def _call(self, func: Callable[..., T], *args, **kwargs) -> T:
        try:
            return await run_db(func, self.engine, *args, **kwargs)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"{func.__name__} failed: {exc}") from exc

    async def get_user_progress(self, user_id: int) -> ProgressState | None:
        return await self._call(get_user_progress, user_id)

    async def insert_user_progress(self, user_id: int, point: int, level: int) -> bool:
        return await self._call(insert_user_progress, user_id, point, level)

    async def update_user_progress(self, user_id: int, point: int, level: int) -> bool:
        return await self._call(update_user_progress, user_id, point, level)

    async def increment_user_progress(
        self,
        user_id: int,
        *,
        step: int = DEFAULT_LEVEL_STEP,
        first_activity_points: int = 1,
    ) -> tuple[ProgressState, bool]:
        return await self._call(
            increment_user_progress,
            user_id,
            step=step,
            first_activity_points=first_activity_points,
        )

    async def get_welcome_config(self, guild_id: int) -> WelcomeSettings | None:
        return await self._call(get_welcome_config, guild_id)

    async def set_welcome_config(self, guild_id: int, channel_id: int, message: str) -> None:
        await self._call(set_welcome_config, guild_id, channel_id, message)
