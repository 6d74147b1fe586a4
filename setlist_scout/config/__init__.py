"""Configuration module: exports Settings and load_config."""

from setlist_scout.config.loader import load_config
from setlist_scout.config.settings import Settings

__all__ = ["Settings", "load_config"]
