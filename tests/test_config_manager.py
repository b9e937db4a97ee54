"""
Unit tests for doctoral_credits.config_manager and logging setup.
"""
import logging
from pathlib import Path

from doctoral_credits.config_manager import ConfigManager
from doctoral_credits.logging_config import setup_logging


class TestConfigManager:
    """Defaults, secrets overrides and environment precedence."""

    def test_defaults(self):
        config = ConfigManager(environ={})
        assert config.get_all_config() == ConfigManager.DEFAULTS
        assert config.storage_path == Path("~/.doctoral_credits/storage.json").expanduser()
        assert config.log_dir is None

    def test_overrides(self, tmp_path):
        config = ConfigManager({"storage_path": str(tmp_path / "s.json"), "ruleset": "2030"}, environ={})
        assert config.storage_path == tmp_path / "s.json"
        assert config.get("ruleset") == "2030"

    def test_unknown_override_is_ignored(self):
        config = ConfigManager({"theme": "dark"}, environ={})
        assert config.get("theme") is None

    def test_environment_wins(self, tmp_path):
        config = ConfigManager(
            {"log_level": "WARNING"},
            environ={"DOCTORAL_CREDITS_LOG_LEVEL": "DEBUG", "DOCTORAL_CREDITS_LOG_DIR": str(tmp_path)},
        )
        assert config.get("log_level") == "DEBUG"
        assert config.log_dir == tmp_path

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("DOCTORAL_CREDITS_STORAGE_KEY", "customKey")
        assert ConfigManager().get("storage_key") == "customKey"

    def test_get_all_config_is_a_copy(self):
        config = ConfigManager({"ruleset": "2030"}, environ={})
        snapshot = config.get_all_config()
        snapshot["ruleset"] = "other"
        assert snapshot.keys() == ConfigManager.DEFAULTS.keys()
        assert config.get("ruleset") == "2030"


class TestSetupLogging:
    """Root logger configuration."""

    def test_console_only(self, clean_root_logger):
        before = len(clean_root_logger.handlers)
        setup_logging(level="DEBUG")
        assert clean_root_logger.level == logging.DEBUG
        assert len(clean_root_logger.handlers) == before + 1

    def test_files_and_idempotence(self, clean_root_logger, tmp_path):
        before = len(clean_root_logger.handlers)
        setup_logging(app_name="tracker", log_dir=tmp_path / "logs")
        setup_logging(app_name="tracker", log_dir=tmp_path / "logs")

        assert len(clean_root_logger.handlers) == before + 3
        logging.getLogger("doctoral_credits.test").error("boom")
        for handler in clean_root_logger.handlers:
            handler.flush()

        assert "boom" in (tmp_path / "logs" / "tracker.log").read_text()
        assert "boom" in (tmp_path / "logs" / "tracker-error.log").read_text()

    def test_unknown_level_falls_back_to_info(self, clean_root_logger):
        setup_logging(level="LOUD")
        assert clean_root_logger.level == logging.INFO
