"""
tally.constants — Shared Constants & Helpers
=============================================

Single source of truth for the leveling formula and default reply texts.
Import from here instead of duplicating in services and the bot.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Leveling formula — THE single canonical implementation
# ---------------------------------------------------------------------------
DEFAULT_LEVEL_STEP = 10


def points_for_level(level: int, step: int = DEFAULT_LEVEL_STEP) -> int:
    """Points at which a member at *level* moves up to ``level + 1``.

    Linear formula::

        required = level * step

    With the default step that is 10 points at level 1, 20 at level 2, …
    """
    return level * step


# ---------------------------------------------------------------------------
# Default reply templates (overridable in config.yaml → messages)
# ---------------------------------------------------------------------------
DEFAULT_PONG_TEXT = "Pong!"
DEFAULT_NO_DATA_TEXT = "No data yet. Say something and check back!"
DEFAULT_BALANCE_TEXT = "You have {point} points at level {level} ({next} needed to level up)."
DEFAULT_LEVEL_UP_TEXT = "Congratulations {mention}, you reached level {level}!"

# Placeholders recognised in guild welcome messages
WELCOME_MEMBER_PLACEHOLDER = "{member}"
WELCOME_GUILD_PLACEHOLDER = "{guild}"
