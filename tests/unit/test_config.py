"""Tests for configuration management."""

from pathlib import Path

import pytest

from market_scout.config.settings import AutoDevConfig, OpenAIConfig, Settings


class TestSettings:
    """Tests for Settings model."""

    def test_default_settings(self, monkeypatch) -> None:
        monkeypatch.delenv("MARKET_SCOUT_LIVE_SEARCH_ENABLED", raising=False)
        monkeypatch.delenv("MARKET_SCOUT_DATA_DIR", raising=False)
        settings = Settings(_env_file=None)

        assert settings.live_search_enabled is False
        assert settings.llm_enabled is True
        assert settings.watch_sources == ["auto.dev"]
        assert settings.watch_store_path == Path("local_data") / "watches.json"

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("MARKET_SCOUT_LIVE_SEARCH_ENABLED", "true")
        monkeypatch.setenv("MARKET_SCOUT_DATA_DIR", "/tmp/scout")

        settings = Settings(_env_file=None)

        assert settings.live_search_enabled is True
        assert settings.watch_store_path == Path("/tmp/scout/watches.json")

    def test_autodev_defaults(self) -> None:
        config = AutoDevConfig(_env_file=None)
        assert config.base_url == "https://api.auto.dev"
        assert config.top_n == 50
        assert config.timeout_ms == 3500
        assert config.timeout_seconds == 3.5

    def test_autodev_key_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("AUTODEV_API_KEY", "from-env")
        assert AutoDevConfig(_env_file=None).api_key.get_secret_value() == "from-env"

    def test_top_n_bounds(self) -> None:
        with pytest.raises(ValueError):
            AutoDevConfig(_env_file=None, top_n=0)

    def test_openai_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        config = OpenAIConfig(_env_file=None)
        assert config.api_key.get_secret_value() == ""
        assert config.temperature == 0.2


class TestUserConfig:
    def test_init_user_config_writes_template(self, tmp_path, monkeypatch) -> None:
        from market_scout.config import settings as settings_module

        config_dir = tmp_path / "market-scout"
        monkeypatch.setattr(settings_module, "USER_CONFIG_DIR", config_dir)
        monkeypatch.setattr(settings_module, "USER_CONFIG_FILE", config_dir / "config.yaml")

        path = settings_module.init_user_config()

        assert path.exists()
        assert "autodev:" in path.read_text(encoding="utf-8")

    def test_init_user_config_keeps_existing(self, tmp_path, monkeypatch) -> None:
        from market_scout.config import settings as settings_module

        config_file = tmp_path / "config.yaml"
        config_file.write_text("live_search_enabled: true\n", encoding="utf-8")
        monkeypatch.setattr(settings_module, "USER_CONFIG_DIR", tmp_path)
        monkeypatch.setattr(settings_module, "USER_CONFIG_FILE", config_file)

        settings_module.init_user_config()

        assert config_file.read_text(encoding="utf-8") == "live_search_enabled: true\n"

    def test_get_settings_reads_user_file(self, tmp_path, monkeypatch) -> None:
        from market_scout.config import settings as settings_module

        config_file = tmp_path / "config.yaml"
        config_file.write_text("live_search_enabled: true\nwatch_sources: [auto.dev, cars.com]\n")
        monkeypatch.setattr(settings_module, "USER_CONFIG_FILE", config_file)
        monkeypatch.delenv("MARKET_SCOUT_LIVE_SEARCH_ENABLED", raising=False)
        monkeypatch.delenv("MARKET_SCOUT_WATCH_SOURCES", raising=False)

        settings_module.get_settings.cache_clear()
        try:
            settings = settings_module.get_settings()
            assert settings.live_search_enabled is True
            assert settings.watch_sources == ["auto.dev", "cars.com"]
        finally:
            settings_module.get_settings.cache_clear()
