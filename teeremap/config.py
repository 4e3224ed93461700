"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .domain.exceptions import ConfigError
from .domain.frost_delay import LATEST_START_MINUTES, MAX_DELAY_MINUTES
from .domain.models import DEFAULT_CAPACITY, Strategy
from .domain.time_codec import format_time, parse_time

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RemapDefaults(BaseModel):
    """Default settings for generating and mapping replacement slots."""
    capacity: int = DEFAULT_CAPACITY
    interval_a: int = 6
    interval_b: int = 7
    alternating: bool = True
    strategy: Strategy = Strategy.FORWARD_ONLY
    keep_together: bool = True

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        """Ensure every slot can hold at least one player."""
        if value < 1:
            raise ValueError("capacity must be at least 1")
        return value

    @field_validator("interval_a", "interval_b")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Ensure intervals move time forward."""
        if value <= 0:
            raise ValueError(f"Interval must be greater than zero, got {value}")
        return value


class FrostDelayConfig(BaseModel):
    """Limits for frost delays."""
    max_delay_minutes: int = MAX_DELAY_MINUTES
    latest_start: str = format_time(LATEST_START_MINUTES)

    @field_validator("max_delay_minutes")
    @classmethod
    def validate_max_delay(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_delay_minutes must be greater than zero")
        return value

    @field_validator("latest_start")
    @classmethod
    def validate_latest_start(cls, value: str) -> str:
        """Normalize the latest start time to HH:MM."""
        return format_time(parse_time(value))

    @property
    def latest_start_minutes(self) -> int:
        return parse_time(self.latest_start)


class AppConfig(BaseModel):
    """Application configuration."""
    store_path: Path = Path("teesheet.json")
    log_level: str = "WARNING"
    defaults: RemapDefaults = Field(default_factory=RemapDefaults)
    frost_delay: FrostDelayConfig = Field(default_factory=FrostDelayConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value}")
        return level

    @model_validator(mode="after")
    def validate_store_path(self) -> "AppConfig":
        """Ensure the store path points at a JSON file."""
        if self.store_path.suffix.lower() != ".json":
            raise ValueError("store_path must point to a .json file")
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative store paths are resolved against the config file's directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping at the root level.")

        try:
            config = cls(**data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc

        if not config.store_path.is_absolute():
            config = config.model_copy(update={"store_path": config_path.parent / config.store_path})

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
