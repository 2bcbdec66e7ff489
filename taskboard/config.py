"""Configuration storage for Taskboard.

Stores user preferences in ~/.taskboard/config.json. ``TASKBOARD_HOME``
moves the config directory and ``TASKBOARD_DATA_DIR`` overrides where the
collections are kept.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class TrackerConfig(BaseModel):
    """User-level settings."""

    data_dir: Optional[str] = None
    log_level: str = "WARNING"
    default_user: Optional[str] = None

    @property
    def data_path(self) -> Path:
        override = os.environ.get("TASKBOARD_DATA_DIR")
        if override:
            return Path(override)
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return get_config_dir() / "data"


def get_config_dir() -> Path:
    """Get the Taskboard config directory."""
    config_dir = Path(os.environ.get("TASKBOARD_HOME") or Path.home() / ".taskboard")
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config() -> TrackerConfig:
    """Load configuration, falling back to defaults."""
    config_file = get_config_dir() / "config.json"
    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
            return TrackerConfig(**data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Ignoring invalid config {config_file}: {e}")
    return TrackerConfig()  # defaults


def save_config(config: TrackerConfig) -> None:
    """Save configuration."""
    config_file = get_config_dir() / "config.json"
    config_file.write_text(
        json.dumps(config.model_dump(), indent=2),
        encoding="utf-8",
    )
