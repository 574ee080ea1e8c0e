"""Process configuration for tillprint."""

from tillprint.config.settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
