"""
Tally — Activity Points & Welcome Bot for Discord
==================================================
Counts member activity, levels people up as their points accumulate, and
greets newcomers with a per-guild welcome message.

Package layout::

    tally/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Leveling formula + default reply templates
    ├── errors.py          # Recoverable per-event failures
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # user_progress, guild_welcome
    │   └── seed.py        # Welcome config seeder (config.yaml → DB)
    ├── engine/
    │   └── progression.py # Pure point/level transition rule
    ├── services/
    │   ├── store_service.py       # Store client (reads, guarded writes)
    │   ├── progression_service.py # Activity → level-up decision
    │   └── welcome_service.py     # Member join greetings
    └── bot/
        ├── core.py        # Client subclass, wiring
        ├── gateway.py     # Discord send/reply/resolve adapter
        ├── commands.py    # ~ping, ~check
        └── dispatcher.py  # Event routing + error isolation
"""

__version__ = "0.1.0"
