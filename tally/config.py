"""
tally.config — YAML Configuration Loader
=========================================

**Why this file exists:**
Secrets (``DISCORD_TOKEN``, ``DATABASE_URL``) come from the environment.
Everything else that an operator may want to tune without touching code
lives in ``config.yaml``: the command prefix, the leveling step, the reply
texts, and optional welcome-message seeds.

Usage::

    from tally.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.bot_prefix)        # "~"
    print(cfg.level_step)        # 10
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from tally.constants import (
    DEFAULT_BALANCE_TEXT,
    DEFAULT_LEVEL_STEP,
    DEFAULT_LEVEL_UP_TEXT,
    DEFAULT_NO_DATA_TEXT,
    DEFAULT_PONG_TEXT,
)


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class MessageTemplates:
    """User-facing reply texts.

    ``balance`` is formatted with ``point``, ``level`` and ``next``;
    ``level_up`` with ``mention`` and ``level``.
    """

    pong: str = DEFAULT_PONG_TEXT
    no_data: str = DEFAULT_NO_DATA_TEXT
    balance: str = DEFAULT_BALANCE_TEXT
    level_up: str = DEFAULT_LEVEL_UP_TEXT


@dataclass(frozen=True, slots=True)
class WelcomeSeed:
    """A welcome configuration to upsert on startup."""

    guild_id: int
    channel_id: int
    message: str


@dataclass(frozen=True, slots=True)
class TallyConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Discord
    bot_prefix: str = "~"

    # Progression
    level_step: int = DEFAULT_LEVEL_STEP  # Points per level: threshold = level * step
    first_activity_points: int = 1        # Points granted when a record is created

    # Presentation
    messages: MessageTemplates = field(default_factory=MessageTemplates)

    # Optional
    welcome: tuple[WelcomeSeed, ...] = ()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> TallyConfig:
    """Read *path* and return a :class:`TallyConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a welcome entry is missing one of its keys.
    ValueError
        If the progression settings would break the level invariant.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return parse_config(raw)


def _check_template(name: str, template: str, **sample) -> None:
    """Format *template* once so a bad placeholder fails at startup."""
    try:
        template.format(**sample)
    except (AttributeError, KeyError, IndexError, ValueError) as exc:
        fields = ", ".join(sample)
        raise ValueError(
            f"messages.{name} must only use the fields {{{fields}}}: {exc!r}"
        ) from exc


def parse_config(raw: dict) -> TallyConfig:
    """Build a :class:`TallyConfig` from an already-decoded mapping."""
    level_step = int(raw.get("level_step", DEFAULT_LEVEL_STEP))
    first_points = int(raw.get("first_activity_points", 1))

    if level_step < 1:
        raise ValueError(f"level_step must be at least 1, got {level_step}")
    # A fresh record sits at level 1, so its points must stay below one step.
    if not 0 <= first_points < level_step:
        raise ValueError(
            f"first_activity_points must be in [0, {level_step}), got {first_points}"
        )

    msgs: dict = raw.get("messages") or {}
    defaults = MessageTemplates()
    messages = MessageTemplates(
        pong=msgs.get("pong", defaults.pong),
        no_data=msgs.get("no_data", defaults.no_data),
        balance=msgs.get("balance", defaults.balance),
        level_up=msgs.get("level_up", defaults.level_up),
    )
    _check_template("balance", messages.balance, point=0, level=1, next=1)
    _check_template("level_up", messages.level_up, mention="<@0>", level=2)

    welcome = tuple(
        WelcomeSeed(
            guild_id=int(entry["guild_id"]),
            channel_id=int(entry["channel_id"]),
            message=str(entry["message"]),
        )
        for entry in raw.get("welcome") or []
    )

    return TallyConfig(
        bot_prefix=str(raw.get("bot_prefix", "~")),
        level_step=level_step,
        first_activity_points=first_points,
        messages=messages,
        welcome=welcome,
    )
