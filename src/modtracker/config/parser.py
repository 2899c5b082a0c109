"""Configuration parser with Pydantic validation."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigError

CONFIG_DIR = ".modtracker"
CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MODTRACKER_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TrackerSettings(BaseModel):
    """Which files are tracked."""

    dirs: List[str] = Field(default_factory=lambda: ["src"])
    exclude_patterns: List[str] = Field(default_factory=lambda: [
        "**/*.pyc",
        "**/*.swp",
        "**/*~",
        "**/.#*",
    ])
    snapshot_file: Optional[str] = None

    @field_validator("dirs", "exclude_patterns", mode="before")
    @classmethod
    def _split_single(cls, value: Any) -> Any:
        # A single value from the environment arrives as a plain string
        if isinstance(value, str):
            return [value]
        return value


class WatchSettings(BaseModel):
    """Polling loop settings."""

    interval: float = Field(default=1.0, gt=0)


class LoggingSettings(BaseModel):
    """Log output settings."""

    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class ConfigSource:
    """Configuration source tracking."""

    def __init__(self, name: str, data: Dict[str, Any]):
        self.name = name
        self.data = data


class TrackerConfig(BaseModel):
    """Main modtracker configuration."""

    version: str = "1.0"
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _parse_env_vars() -> Dict[str, Any]:
    """Parse MODTRACKER_* environment variables."""
    env_config = {}

    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            # Remove prefix and convert to lowercase with underscores
            config_key = key[len(ENV_PREFIX):].lower()

            # Handle nested keys with double underscores
            if "__" in config_key:
                parts = config_key.split("__")
                if len(parts) == 2:
                    section, field = parts
                    if section not in env_config:
                        env_config[section] = {}
                    env_config[section][field] = _parse_env_value(value)
            else:
                env_config[config_key] = _parse_env_value(value)

    return env_config


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    # Handle comma-separated lists
    if "," in value:
        return [item.strip() for item in value.split(",")]

    # Handle booleans
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    # Handle numbers
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    # Return as string
    return value


def _merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Merge multiple config dictionaries with later ones taking precedence."""
    result = {}

    for config in configs:
        _deep_merge(result, config)

    return result


def _deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Deep merge source into target."""
    for key, value in source.items():
        if key in target and isinstance(target[key], dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(base_path: Path, cli_overrides: Optional[Dict[str, Any]] = None) -> Tuple[TrackerConfig, List[ConfigSource]]:
    """Load configuration with inheritance: defaults < config.yaml < env vars < CLI args."""
    sources = []

    # 1. Built-in defaults
    defaults = TrackerConfig().model_dump()
    sources.append(ConfigSource("defaults", defaults))

    # 2. Config file
    config_path = base_path / CONFIG_DIR / CONFIG_FILE
    file_config = {}
    if config_path.exists():
        file_config = _read_config_file(config_path)
        sources.append(ConfigSource(CONFIG_FILE, file_config))

    # 3. Environment variables
    env_config = _parse_env_vars()
    if env_config:
        sources.append(ConfigSource("environment", env_config))

    # 4. CLI overrides
    cli_config = cli_overrides or {}
    if cli_config:
        sources.append(ConfigSource("cli", cli_config))

    # Merge all configs in priority order
    merged_config = _merge_configs(defaults, file_config, env_config, cli_config)

    try:
        config = TrackerConfig(**merged_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    return config, sources


def load_config_simple(base_path: Path, cli_overrides: Optional[Dict[str, Any]] = None) -> TrackerConfig:
    """Load configuration without source tracking."""
    config, _ = load_config(base_path, cli_overrides)
    return config
