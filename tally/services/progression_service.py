"""
tally.services.progression_service — Activity → Level-Up Decision
==================================================================

Turns "this member just said something" into a persisted counter update and
tells the caller whether a level-up announcement is due.

Pipeline:
1. Ask the store to apply one activity atomically
   (:meth:`StoreClient.increment_user_progress`).
2. Never seen → the store inserts the first-activity state (no announcement).
3. Otherwise the store returns the post-update ``(point, level)``.  A plain
   increment always leaves ``point >= 1``, so ``point == 0`` on an existing
   row means the threshold was crossed and the member levelled up.

The read-modify-write happens inside a single SQL statement, so bursts of
messages from the same member never overwrite each other.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tally.constants import DEFAULT_LEVEL_STEP
from tally.engine.progression import ActivityOutcome

if TYPE_CHECKING:
    from tally.services.store_service import StoreClient

logger = logging.getLogger(__name__)


class ProgressionEngine:
    """Applies activity events to members' stored progress."""

    def __init__(
        self,
        store: StoreClient,
        *,
        level_step: int = DEFAULT_LEVEL_STEP,
        first_activity_points: int = 1,
    ) -> None:
        self.store = store
        self.level_step = level_step
        self.first_activity_points = first_activity_points

    async def on_activity(self, user_id: int) -> ActivityOutcome:
        """Count one activity for *user_id* and return what happened.

        Raises
        ------
        StoreUnavailable
            If the database could not be reached.
        """
        state, created = await self.store.increment_user_progress(
            user_id,
            step=self.level_step,
            first_activity_points=self.first_activity_points,
        )
        if created:
            logger.debug("Created progress for user %s: %s", user_id, state)
            return ActivityOutcome(state, leveled_up=False, created=True)

        outcome = ActivityOutcome(state, leveled_up=state.point == 0)
        if outcome.leveled_up:
            logger.info("User %s reached level %d", user_id, outcome.new_level)
        return outcome
