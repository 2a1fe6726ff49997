"""
config.py
Read-only settings for folderplay, loaded from an optional JSON file
"""

import json
import os
from dataclasses import dataclass, fields

from logging_config import get_logger, ConfigurationError

logger = get_logger('config')

CONFIG_PATH = os.path.expanduser("~/.folderplay.json")
CONFIG_ENV = "FOLDERPLAY_CONFIG"

SHUFFLE_POLICIES = ("queue", "reorder")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class PlayerConfig:
    """Application settings."""

    # Playlist
    audio_extensions: tuple = ('.mp3', '.wav', '.wma')
    shuffle_policy: str = "queue"  # "queue" or "reorder"

    # Timers
    progress_interval_ms: int = 500
    poll_interval_ms: int = 100

    # Audio
    initial_volume: int = 70  # percent

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    def validate(self):
        """Raise ConfigurationError listing every invalid value."""
        issues = []
        if self.shuffle_policy not in SHUFFLE_POLICIES:
            issues.append(f"shuffle_policy must be one of {SHUFFLE_POLICIES}, got {self.shuffle_policy!r}")
        if not self.audio_extensions:
            issues.append("audio_extensions must not be empty")
        for ext in self.audio_extensions:
            if not isinstance(ext, str) or not ext.startswith('.'):
                issues.append(f"audio extension must start with '.', got {ext!r}")
        for name in ('progress_interval_ms', 'poll_interval_ms'):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                issues.append(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.initial_volume, int) or not 0 <= self.initial_volume <= 100:
            issues.append(f"initial_volume must be 0-100, got {self.initial_volume!r}")
        if str(self.log_level).upper() not in LOG_LEVELS:
            issues.append(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        if issues:
            raise ConfigurationError("; ".join(issues))


def default_config_path():
    return os.environ.get(CONFIG_ENV) or CONFIG_PATH


def load_config(path=None) -> PlayerConfig:
    """Load settings from `path` (or the default location).

    A missing file yields the defaults. Unknown keys are logged and ignored.
    """
    path = path or default_config_path()
    config = PlayerConfig()

    if not os.path.exists(path):
        logger.debug(f"No settings file at {path}, using defaults")
        return config

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must hold a JSON object")

    known = {f.name for f in fields(PlayerConfig)}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting {key!r} in {path}")
            continue
        if key == 'audio_extensions' and isinstance(value, list):
            value = tuple(value)
        setattr(config, key, value)

    config.validate()
    logger.info(f"Loaded settings from {path}")
    return config
