"""Configuration module."""

from .parser import ConfigSource, TrackerConfig, load_config, load_config_simple

__all__ = ["ConfigSource", "TrackerConfig", "load_config", "load_config_simple"]
