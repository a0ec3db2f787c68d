"""
tally.engine.progression — Point/Level Transition Rule
=======================================================

Pure state machine: no Discord I/O, no DB I/O.

One activity adds one point.  When the points reach the current level's
threshold (``level * step``) the member moves up a level and the counter
starts again from zero, so ``point < level * step`` always holds afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

from tally.constants import DEFAULT_LEVEL_STEP, points_for_level

__all__ = ["ActivityOutcome", "ProgressState", "advance", "initial_state"]


@dataclass(frozen=True, slots=True)
class ProgressState:
    """A member's counter as stored in ``user_progress``."""

    point: int
    level: int


@dataclass(frozen=True, slots=True)
class ActivityOutcome:
    """Result of applying one activity to a member."""

    state: ProgressState
    leveled_up: bool = False
    created: bool = False

    @property
    def new_level(self) -> int:
        return self.state.level


def initial_state(first_activity_points: int = 1) -> ProgressState:
    """State written for a member's very first observed activity."""
    return ProgressState(point=first_activity_points, level=1)


def advance(state: ProgressState, step: int = DEFAULT_LEVEL_STEP) -> ActivityOutcome:
    """Apply one activity to *state*.

    >>> advance(ProgressState(point=9, level=1))
    ActivityOutcome(state=ProgressState(point=0, level=2), leveled_up=True, created=False)
    >>> advance(ProgressState(point=3, level=2)).state
    ProgressState(point=4, level=2)
    """
    point = state.point + 1
    if point >= points_for_level(state.level, step):
        return ActivityOutcome(ProgressState(point=0, level=state.level + 1), leveled_up=True)
    return ActivityOutcome(ProgressState(point=point, level=state.level))
