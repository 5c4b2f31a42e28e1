"""Settings management with Pydantic Settings.

Configuration priority (highest to lowest):
1. Environment variables
2. .env file in current directory
3. User config file (~/.config/market-scout/config.yaml)
4. Default values
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# User config directory
USER_CONFIG_DIR = Path.home() / ".config" / "market-scout"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"


def _load_user_config() -> dict[str, Any]:
    """Load user configuration from ~/.config/market-scout/config.yaml."""
    if USER_CONFIG_FILE.exists():
        with open(USER_CONFIG_FILE, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    return {}


class AutoDevConfig(BaseSettings):
    """auto.dev listings API configuration (retrieval collaborator)."""

    base_url: str = "https://api.auto.dev"
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias="AUTODEV_API_KEY",
    )
    # Retrieval batch size; the provider itself caps a page at 100.
    top_n: int = Field(default=50, ge=1, le=500)
    timeout_ms: int = Field(default=3500, ge=1)
    sort: str = "price.asc"

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,  # Allow both field name and alias
    )

    @property
    def timeout_seconds(self) -> float:
        """Retrieval timeout in seconds."""
        return self.timeout_ms / 1000.0


class OpenAIConfig(BaseSettings):
    """Extraction model configuration (any OpenAI-compatible endpoint)."""

    base_url: str = "https://api.openai.com/v1"
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias="OPENAI_API_KEY",
    )
    model: str = "gpt-4.1-mini"
    temperature: float = 0.2
    max_tokens: int = 2048
    timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Main application settings.

    Configuration is loaded from multiple sources (highest priority first):
    1. Environment variables (MARKET_SCOUT_* prefix)
    2. .env file in current directory
    3. User config file (~/.config/market-scout/config.yaml)
    4. Default values

    Example .env file:
        AUTODEV_API_KEY=your-autodev-key
        OPENAI_API_KEY=sk-your-key
        MARKET_SCOUT_LIVE_SEARCH_ENABLED=true
        MARKET_SCOUT_AUTODEV__TOP_N=25

    Example config.yaml:
        autodev:
          api_key: your-autodev-key
          timeout_ms: 5000
        live_search_enabled: true
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKET_SCOUT_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    autodev: AutoDevConfig = Field(default_factory=AutoDevConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)

    # Feature toggles
    live_search_enabled: bool = False
    llm_enabled: bool = True

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path("local_data"))
    watch_store_file: str = "watches.json"

    # Watch defaults
    watch_sources: list[str] = Field(default_factory=lambda: ["auto.dev"])

    @property
    def watch_store_path(self) -> Path:
        """Location of the JSON watch store."""
        return self.data_dir / self.watch_store_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Loads configuration from user config file first, then applies
    environment variables and .env file on top.
    """
    user_config = _load_user_config()

    # Handle nested provider configs
    autodev_config = None
    if "autodev" in user_config:
        autodev_config = AutoDevConfig(**user_config.pop("autodev"))

    openai_config = None
    if "openai" in user_config:
        openai_config = OpenAIConfig(**user_config.pop("openai"))

    # Create settings with user config as defaults
    # Environment variables and .env will override these
    settings = Settings(**user_config)

    # Use user-file provider sections only when the env var is not set
    if (
        autodev_config
        and autodev_config.api_key.get_secret_value()
        and not settings.autodev.api_key.get_secret_value()
    ):
        settings.autodev = autodev_config

    if (
        openai_config
        and openai_config.api_key.get_secret_value()
        and not settings.openai.api_key.get_secret_value()
    ):
        settings.openai = openai_config

    return settings


def init_user_config() -> Path:
    """Initialize user config directory and return the config file path.

    Creates ~/.config/market-scout/config.yaml with a template if it doesn't exist.
    """
    USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    if not USER_CONFIG_FILE.exists():
        template = """# Market Scout Configuration
# This file is loaded automatically. Environment variables take priority.

# auto.dev listings API (or set AUTODEV_API_KEY env var)
autodev:
  api_key: ""
  base_url: "https://api.auto.dev"
  # top_n: 50          # retrieval batch size per explore cycle
  # timeout_ms: 3500   # retrieval timeout

# Extraction model (or set OPENAI_API_KEY env var)
# openai:
#   api_key: ""
#   model: "gpt-4.1-mini"

# Use live listings instead of deterministic placeholder candidates
# live_search_enabled: false

# Disable the extraction model entirely (deterministic renders only)
# llm_enabled: true

# data_dir: "local_data"
"""
        USER_CONFIG_FILE.write_text(template, encoding="utf-8")

    return USER_CONFIG_FILE
