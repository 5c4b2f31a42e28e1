"""Tests for CLI commands."""

import json

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Set up temporary data directory."""
    data_dir = tmp_path / "local_data"
    data_dir.mkdir()
    monkeypatch.setenv("MARKET_SCOUT_DATA_DIR", str(data_dir))
    return data_dir


class TestMain:
    def test_version(self, runner):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "market-scout version" in result.stdout

    def test_config_show(self, runner):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Market Scout Configuration" in result.stdout


class TestSessionCommands:
    def test_create_session_with_id(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["session", "new", "Boxster hunt", "--id", "custom-id"])
        assert result.exit_code == 0
        assert "custom-id" in result.stdout
        assert (temp_data_dir / "custom-id" / "session.json").exists()

    def test_list_sessions(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        runner.invoke(app, ["session", "new", "Session 1", "--id", "s1"])
        runner.invoke(app, ["session", "new", "Session 2", "--id", "s2"])

        result = runner.invoke(app, ["session", "list"])
        assert result.exit_code == 0
        assert "s1" in result.stdout
        assert "s2" in result.stdout

    def test_show_without_session(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["session", "show"])
        assert result.exit_code == 1

    def test_switch_missing(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["session", "switch", "missing"])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_delete(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        runner.invoke(app, ["session", "new", "Test", "--id", "gone"])
        result = runner.invoke(app, ["session", "delete", "gone", "--yes"])
        assert result.exit_code == 0
        assert not (temp_data_dir / "gone").exists()


class TestChat:
    def test_chat_requires_session(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["chat", "hello", "--offline"])
        assert result.exit_code == 1
        assert "No current session" in result.stdout

    def test_chat_advances_and_saves(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        runner.invoke(app, ["session", "new", "Test", "--id", "s1"])
        result = runner.invoke(app, ["chat", "I want a Boxster", "--offline"])

        assert result.exit_code == 0
        assert "S1 Capture" in result.stdout
        saved = json.loads((temp_data_dir / "s1" / "session.json").read_text(encoding="utf-8"))
        assert saved["state"] == "S1_CAPTURE"
        assert saved["last_user_message"] == "I want a Boxster"


class TestSeedAndExport:
    def test_seed(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        runner.invoke(app, ["session", "new", "Test", "--id", "s1"])
        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0
        assert "either" in result.stdout

    def test_export_to_file(self, runner, temp_data_dir, tmp_path):
        from market_scout.cli.main import app

        runner.invoke(app, ["session", "new", "Test", "--id", "s1"])
        output = tmp_path / "out" / "artifacts.json"
        result = runner.invoke(app, ["export", "--output", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["session"]["id"] == "s1"
        assert data["watch"] is None


class TestWatchCommands:
    def test_list_empty(self, runner, temp_data_dir):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["watch", "list"])
        assert result.exit_code == 0
        assert "No watches saved" in result.stdout

    def test_list_saved(self, runner, temp_data_dir):
        from market_scout.cli.main import app
        from market_scout.core.types import ConstraintTiers, Session
        from market_scout.market.watch import WatchService
        from market_scout.market.watch_store import JsonFileWatchStore

        store = JsonFileWatchStore(temp_data_dir / "watches.json")
        WatchService(store=store).ensure_watch(
            Session(id="s", constraints=ConstraintTiers(tier1=["Manual only"]))
        )

        result = runner.invoke(app, ["watch", "list"])
        assert result.exit_code == 0
        assert "Manual" in result.stdout


class TestDataDirFromUserConfig:
    @pytest.fixture
    def configured_dir(self, tmp_path, monkeypatch):
        from market_scout.config import settings as settings_module

        data_dir = tmp_path / "configured_data"
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f'data_dir: "{data_dir.as_posix()}"\n', encoding="utf-8")
        monkeypatch.setattr(settings_module, "USER_CONFIG_FILE", config_file)
        monkeypatch.delenv("MARKET_SCOUT_DATA_DIR", raising=False)
        settings_module.get_settings.cache_clear()
        return data_dir

    def test_sessions_written_to_configured_dir(self, runner, configured_dir):
        from market_scout.cli.main import app

        result = runner.invoke(app, ["session", "new", "Boxster hunt", "--id", "cfg"])
        assert result.exit_code == 0
        assert (configured_dir / "cfg" / "session.json").exists()

    def test_watch_store_uses_configured_dir(self, configured_dir):
        from market_scout.cli.watch import get_watch_service
        from market_scout.core.types import ConstraintTiers, Session

        get_watch_service().ensure_watch(
            Session(id="s", constraints=ConstraintTiers(tier1=["Manual only"]))
        )
        assert (configured_dir / "watches.json").exists()
