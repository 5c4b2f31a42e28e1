"""Configuration management for Market Scout."""

from market_scout.config.settings import (
    Settings,
    USER_CONFIG_FILE,
    get_settings,
    init_user_config,
)

__all__ = ["Settings", "USER_CONFIG_FILE", "get_settings", "init_user_config"]
