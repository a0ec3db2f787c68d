"""
tests/test_config.py — Configuration Loader & Seeder Tests
==========================================================
"""

from __future__ import annotations

import pytest

from tally.config import MessageTemplates, TallyConfig, WelcomeSeed, load_config, parse_config
from tally.database.engine import init_db
from tally.database.seed import seed_welcome_configs
from tally.services import store_service

FULL_YAML = """\
bot_prefix: "!"
level_step: 5
first_activity_points: 0
messages:
  pong: "Pong pong"
welcome:
  - guild_id: 100
    channel_id: 555
    message: "Welcome {member}!"
"""


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(FULL_YAML, encoding="utf-8")

        cfg = load_config(path)

        assert cfg.bot_prefix == "!"
        assert cfg.level_step == 5
        assert cfg.first_activity_points == 0
        assert cfg.messages.pong == "Pong pong"
        assert cfg.messages.no_data == MessageTemplates().no_data
        assert cfg.welcome == (WelcomeSeed(guild_id=100, channel_id=555, message="Welcome {member}!"),)

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == TallyConfig()


class TestParseConfig:
    def test_defaults(self):
        cfg = parse_config({})
        assert cfg.bot_prefix == "~"
        assert cfg.level_step == 10
        assert cfg.first_activity_points == 1
        assert cfg.welcome == ()

    def test_rejects_zero_step(self):
        with pytest.raises(ValueError):
            parse_config({"level_step": 0})

    def test_rejects_first_points_at_threshold(self):
        with pytest.raises(ValueError):
            parse_config({"level_step": 10, "first_activity_points": 10})

    def test_rejects_negative_first_points(self):
        with pytest.raises(ValueError):
            parse_config({"first_activity_points": -1})

    def test_custom_templates_accepted(self):
        cfg = parse_config(
            {
                "messages": {
                    "balance": "{point} pts, L{level} ({next} to go)",
                    "level_up": "GG {mention}, level {level}!",
                }
            }
        )
        assert cfg.messages.level_up.format(mention="<@1>", level=3) == "GG <@1>, level 3!"

    @pytest.mark.parametrize(
        "key, template",
        [
            ("level_up", "{user} reached {level}"),
            ("level_up", "{mention} reached {0}"),
            ("balance", "{points} points"),
            ("balance", "{point} points {"),
        ],
    )
    def test_rejects_unknown_template_fields(self, key, template):
        with pytest.raises(ValueError, match=f"messages.{key}"):
            parse_config({"messages": {key: template}})

    def test_literal_braces_in_templates_are_fine(self):
        cfg = parse_config({"messages": {"balance": "{{ {point} }}"}})
        assert cfg.messages.balance.format(point=4, level=1, next=6) == "{ 4 }"

    def test_welcome_entry_missing_key(self):
        with pytest.raises(KeyError):
            parse_config({"welcome": [{"guild_id": 1, "message": "hi"}]})


class TestWelcomeSeeding:
    def test_seed_writes_rows(self, db_engine):
        seeds = [
            WelcomeSeed(guild_id=100, channel_id=555, message="A"),
            WelcomeSeed(guild_id=200, channel_id=666, message="B"),
        ]
        assert seed_welcome_configs(db_engine, seeds) == 2
        assert store_service.get_welcome_config(db_engine, 200).message == "B"

    def test_seed_is_idempotent_and_updates(self, db_engine):
        seed_welcome_configs(db_engine, [WelcomeSeed(100, 555, "A")])
        seed_welcome_configs(db_engine, [WelcomeSeed(100, 777, "A2")])

        settings = store_service.get_welcome_config(db_engine, 100)
        assert settings.channel_id == 777
        assert settings.message == "A2"

    def test_init_db_seeds(self, db_engine):
        init_db(db_engine, [WelcomeSeed(100, 555, "Hi")])
        assert store_service.get_welcome_config(db_engine, 100).channel_id == 555
