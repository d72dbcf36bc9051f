"""
Display filter configuration.

DisplayFilterSettings holds the user-configurable thresholds and is loaded
from YAML. Every render takes an immutable DisplayFilterConfig snapshot
from it, pinning "now" so one listing is evaluated against one instant.
"""

import os
import time
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

CONFIG_PATH_ENV = "QUAKE_ARCHIVE_DISPLAY_CONFIG"


def current_time_millis() -> int:
    return int(time.time() * 1000)


class DisplayFilterConfig(BaseModel):
    """
    Immutable configuration snapshot evaluated by the display filter.

    Attributes:
        quality_filter_threshold: Worst acceptable quality rank (inclusive)
        magnitude_filter_enabled: Whether to hide small events
        magnitude_filter_threshold: Minimum magnitude shown when enabled
        time_filter_enabled: Whether to hide old events
        time_filter_window_hours: Maximum event age shown when enabled
        now: Reference instant for the time filter (epoch millis)
    """

    model_config = ConfigDict(frozen=True)

    quality_filter_threshold: int = Field(..., ge=0)
    magnitude_filter_enabled: bool = False
    magnitude_filter_threshold: float = 0.0
    time_filter_enabled: bool = False
    time_filter_window_hours: float = Field(0.0, ge=0.0)
    now: int

    @property
    def time_window_millis(self) -> float:
        return self.time_filter_window_hours * 3600 * 1000


class DisplayFilterSettings(BaseModel):
    """
    User-configurable display thresholds.

    Defaults show every quality class, leave the magnitude filter off and
    hide events older than a day.
    """

    quality_filter_threshold: int = Field(4, ge=0)
    magnitude_filter_enabled: bool = False
    magnitude_filter_threshold: float = 4.0
    time_filter_enabled: bool = True
    time_filter_window_hours: float = Field(24.0, ge=0.0)

    class Config:
        json_schema_extra = {
            "example": {
                "quality_filter_threshold": 2,
                "magnitude_filter_enabled": True,
                "magnitude_filter_threshold": 3.5,
                "time_filter_enabled": True,
                "time_filter_window_hours": 48.0,
            }
        }

    def snapshot(self, now: int | None = None) -> DisplayFilterConfig:
        """
        Freeze the settings for one render.

        Args:
            now: Reference instant (epoch millis); defaults to the wall clock

        Returns:
            DisplayFilterConfig carrying the current thresholds
        """
        return DisplayFilterConfig(
            **self.model_dump(),
            now=current_time_millis() if now is None else now,
        )


class DisplayConfigLoader:
    """
    Loads display settings from a YAML configuration file.

    Expected YAML format:
    ```yaml
    display_filter:
      quality_filter_threshold: 2
      magnitude_filter_enabled: true
      magnitude_filter_threshold: 3.5
      time_filter_enabled: true
      time_filter_window_hours: 48
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the display config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Display configuration file not found: {config_path}")

    def load_settings(self) -> DisplayFilterSettings:
        """
        Parse the display_filter section.

        Returns:
            DisplayFilterSettings with unspecified keys left at their defaults

        Raises:
            ValueError: If the section is missing or not a mapping
            pydantic.ValidationError: If a threshold is out of range
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not config or "display_filter" not in config:
            raise ValueError("Configuration file must contain 'display_filter' section")

        section: Any = config["display_filter"] or {}
        if not isinstance(section, dict):
            raise ValueError("'display_filter' section must be a mapping")

        return DisplayFilterSettings(**section)


def load_display_settings(config_path: str | Path | None = None) -> DisplayFilterSettings:
    """
    Load display settings from a path, the QUAKE_ARCHIVE_DISPLAY_CONFIG env
    var, or fall back to defaults when neither is set.
    """
    path = config_path or os.getenv(CONFIG_PATH_ENV)
    if not path:
        return DisplayFilterSettings()
    return DisplayConfigLoader(path).load_settings()
