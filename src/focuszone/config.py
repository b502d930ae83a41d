"""Configuration management for FocusZone."""

import logging
import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path

logger = logging.getLogger(__name__)

FOCUSZONE_HOME = Path(os.environ.get("FOCUSZONE_HOME", Path.home() / "focuszone"))
CONFIG_FILE = FOCUSZONE_HOME / "config" / "focuszone.conf"
DATA_DIR = FOCUSZONE_HOME / "data"


@dataclass
class Config:
    """FocusZone configuration."""

    tasks_file: str = ""
    lunch_time: str = "12:30"
    lunch_duration: int = 45
    hydration_offset_minutes: int = 120
    long_task_minutes: int = 90
    max_suggestion_hours: int = 4
    min_impact_score: float = 40.0
    suggestion_spacing_minutes: int = 30
    max_active_suggestions: int = 1

    @property
    def tasks_path(self) -> Path:
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"

    @property
    def lunch(self) -> time:
        try:
            return time.fromisoformat(self.lunch_time)
        except ValueError:
            logger.warning(f"Invalid LUNCH_TIME {self.lunch_time!r}, using 12:30")
            return time(12, 30)


def _parse_value(raw: str) -> str:
    """Strip quotes and inline comments from a config value."""
    value = raw.strip()
    if value.startswith('"'):
        end_quote = value.find('"', 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if value.startswith("'"):
        end_quote = value.find("'", 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _as_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from focuszone.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, raw = line.partition("=")
        key = key.strip().lower()
        value = _parse_value(raw)

        match key:
            case "tasks_file":
                config.tasks_file = value
            case "lunch_time":
                config.lunch_time = value
            case "lunch_duration":
                config.lunch_duration = _as_int(key, value, config.lunch_duration)
            case "hydration_offset_minutes":
                config.hydration_offset_minutes = _as_int(key, value, config.hydration_offset_minutes)
            case "long_task_minutes":
                config.long_task_minutes = _as_int(key, value, config.long_task_minutes)
            case "max_suggestion_hours":
                config.max_suggestion_hours = _as_int(key, value, config.max_suggestion_hours)
            case "min_impact_score":
                try:
                    config.min_impact_score = float(value)
                except ValueError:
                    logger.warning(f"Invalid number for MIN_IMPACT_SCORE: {value!r}")
            case "suggestion_spacing_minutes":
                config.suggestion_spacing_minutes = _as_int(key, value, config.suggestion_spacing_minutes)
            case "max_active_suggestions":
                config.max_active_suggestions = _as_int(key, value, config.max_active_suggestions)
            case _:
                logger.debug(f"Ignoring unknown config key {key.upper()}")

    return config
