"""Tests for configuration loading."""

from datetime import time
from pathlib import Path

from focuszone.config import DATA_DIR, Config, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.conf") == Config()

    def test_parses_values(self, tmp_path):
        path = tmp_path / "focuszone.conf"
        path.write_text(
            "# FocusZone settings\n"
            "\n"
            'TASKS_FILE="~/my tasks.json"  # quoted\n'
            "LUNCH_TIME=13:00\n"
            "LUNCH_DURATION=30 # minutes\n"
            "MAX_SUGGESTION_HOURS=2\n"
            "MIN_IMPACT_SCORE=55.5\n"
            "MAX_ACTIVE_SUGGESTIONS='2'\n"
            "not a setting\n"
        )
        config = load_config(path)
        assert config.tasks_file == "~/my tasks.json"
        assert config.lunch == time(13, 0)
        assert config.lunch_duration == 30
        assert config.max_suggestion_hours == 2
        assert config.min_impact_score == 55.5
        assert config.max_active_suggestions == 2

    def test_invalid_numbers_keep_defaults(self, tmp_path):
        path = tmp_path / "focuszone.conf"
        path.write_text("LUNCH_DURATION=long\nMIN_IMPACT_SCORE=high\n")
        config = load_config(path)
        assert config.lunch_duration == 45
        assert config.min_impact_score == 40.0

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "focuszone.conf"
        path.write_text("THEME=dark\n")
        assert load_config(path) == Config()


class TestConfig:
    def test_default_tasks_path(self):
        assert Config().tasks_path == DATA_DIR / "tasks.json"

    def test_tasks_path_expands_user(self):
        assert Config(tasks_file="~/t.json").tasks_path == Path.home() / "t.json"

    def test_invalid_lunch_time_falls_back(self):
        assert Config(lunch_time="noon").lunch == time(12, 30)
