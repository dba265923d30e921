"""Configuration management for JogFile."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.dates import DEFAULT_DAY_START_HOUR, DEFAULT_TIMEZONE, LogicalCalendar

logger = logging.getLogger(__name__)

JOGFILE_HOME = Path(os.environ.get("JOGFILE_HOME", Path.home() / "jogfile"))
CONFIG_FILE = JOGFILE_HOME / "config" / "jogfile.conf"
DATA_DIR = JOGFILE_HOME / "data"


@dataclass
class Config:
    """JogFile configuration."""

    timezone: str = DEFAULT_TIMEZONE
    day_start_hour: int = DEFAULT_DAY_START_HOUR
    data_dir: Path = field(default_factory=lambda: DATA_DIR)

    def calendar(self) -> LogicalCalendar:
        """Logical calendar for the configured zone and day start."""
        return LogicalCalendar(timezone=self.timezone, day_start_hour=self.day_start_hour)


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from jogfile.conf, falling back to defaults."""
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

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "day_start_hour":
                try:
                    hour = int(value)
                except ValueError:
                    logger.warning(f"Invalid DAY_START_HOUR {value!r}, using {config.day_start_hour}")
                    continue
                if 0 <= hour <= 12:
                    config.day_start_hour = hour
                else:
                    logger.warning(f"DAY_START_HOUR must be 0-12, got {hour}; using {config.day_start_hour}")
            case "data_dir":
                config.data_dir = Path(value).expanduser()
            case _:
                logger.debug(f"Ignoring unknown config key {key!r}")

    return config
