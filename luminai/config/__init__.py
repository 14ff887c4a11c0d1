"""Configuration module -- exports Settings and load_config."""

from luminai.config.loader import load_config
from luminai.config.settings import ANALYTICAL_QUERY, Settings

__all__ = ["ANALYTICAL_QUERY", "Settings", "load_config"]
