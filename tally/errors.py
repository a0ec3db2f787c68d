"""
tally.errors — Per-Event Failure Types
=======================================

Failures that abort the handling of a single gateway event but must never
take the bot down.  The dispatcher logs them and moves on.

"Not found" is deliberately absent: a missing user or guild row is a normal
branch (``None`` from the store), not an error.
"""

from __future__ import annotations


class TallyError(Exception):
    """Base class for recoverable, per-event failures."""


class StoreUnavailable(TallyError):
    """A database call failed (connection lost, pool exhausted, bad SQL…)."""


class DeliveryFailure(TallyError):
    """An outbound Discord message could not be delivered."""

