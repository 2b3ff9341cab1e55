"""Tests for environment configuration."""

import os

from with_defer.config.environment import DEFAULT_LOG_LEVEL, Environment, load_dotenv_files


class TestLogLevel:
    """Test log level resolution."""

    def test_default(self):
        """WARNING when nothing is set."""
        assert Environment.get_log_level() == DEFAULT_LOG_LEVEL == "WARNING"

    def test_package_variable(self, monkeypatch):
        monkeypatch.setenv("WITH_DEFER_LOG_LEVEL", "info")
        assert Environment.get_log_level() == "INFO"

    def test_ignores_host_variables(self, monkeypatch):
        """LOG_LEVEL and DEBUG belong to the application, not the library."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DEBUG", "1")
        assert Environment.get_log_level() == "WARNING"


class TestEnvironment:
    def test_get_uses_defaults(self, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)
        assert Environment.get("ENV") == "development"

    def test_get_prefers_process_environment(self, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        assert Environment.get("ENV") == "production"

    def test_get_fallback_default(self):
        assert Environment.get("WITH_DEFER_UNKNOWN_SETTING", "fallback") == "fallback"

    def test_get_does_not_read_dotenv(self, tmp_path, monkeypatch):
        monkeypatch.delenv("WITH_DEFER_TEST_UNREAD", raising=False)
        (tmp_path / ".env").write_text("WITH_DEFER_TEST_UNREAD=yes\n")
        assert Environment.get("WITH_DEFER_TEST_UNREAD") is None
        assert "WITH_DEFER_TEST_UNREAD" not in os.environ

    def test_load_dotenv_only_once(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ENV", "development")
        (tmp_path / ".env").write_text("WITH_DEFER_TEST_ONCE=1\n")
        try:
            assert Environment.load_dotenv(tmp_path) == [tmp_path / ".env"]
            assert Environment.load_dotenv(tmp_path) == []
            Environment.reset()
            assert Environment.load_dotenv(tmp_path) == [tmp_path / ".env"]
        finally:
            os.environ.pop("WITH_DEFER_TEST_ONCE", None)


class TestLoadDotenvFiles:
    def test_loads_files_in_order(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ENV", "staging")
        monkeypatch.delenv("WITH_DEFER_TEST_BASE", raising=False)
        monkeypatch.delenv("WITH_DEFER_TEST_STAGE", raising=False)
        (tmp_path / ".env").write_text("WITH_DEFER_TEST_BASE=base\n")
        (tmp_path / ".env.staging").write_text("WITH_DEFER_TEST_STAGE=stage\n")

        try:
            loaded = load_dotenv_files(tmp_path)

            assert loaded == [tmp_path / ".env", tmp_path / ".env.staging"]
            assert Environment.get("WITH_DEFER_TEST_BASE") == "base"
            assert Environment.get("WITH_DEFER_TEST_STAGE") == "stage"
        finally:
            os.environ.pop("WITH_DEFER_TEST_BASE", None)
            os.environ.pop("WITH_DEFER_TEST_STAGE", None)

    def test_does_not_override_existing(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ENV", "development")
        monkeypatch.setenv("WITH_DEFER_LOG_LEVEL", "ERROR")
        (tmp_path / ".env").write_text("WITH_DEFER_LOG_LEVEL=DEBUG\n")

        load_dotenv_files(tmp_path)

        assert Environment.get_log_level() == "ERROR"

    def test_missing_files(self, tmp_path):
        assert load_dotenv_files(tmp_path) == []
