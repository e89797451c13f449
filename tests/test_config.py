"""Tests for Book Lending Tracker configuration.

These tests demonstrate:
1. Default value behavior
2. Environment variable loading
3. Configuration validation
"""

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from book_lending.config import LendingConfig, get_config, reset_config, set_config
from book_lending.logging_config import configure_logging


class TestLendingConfig:
    """Test configuration behavior."""

    def test_default_configuration(self):
        """Test the defaults used when nothing is configured."""
        config = LendingConfig()

        assert config.database_path == Path("data/book_lending.db")
        assert config.database_url is None
        assert config.echo_sql is False
        assert config.default_page_size == 10
        assert config.search_case_sensitive is False
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_environment_variable_loading(self):
        """Test loading configuration from BOOK_LENDING_* variables."""
        env_vars = {
            "BOOK_LENDING_DATABASE_PATH": "/tmp/lending.db",
            "BOOK_LENDING_DEFAULT_PAGE_SIZE": "25",
            "BOOK_LENDING_SEARCH_CASE_SENSITIVE": "true",
            "BOOK_LENDING_DEBUG": "true",
            "BOOK_LENDING_LOG_LEVEL": "WARNING",
        }

        with patch.dict(os.environ, env_vars):
            config = LendingConfig()

            assert config.database_path == Path("/tmp/lending.db")
            assert config.default_page_size == 25
            assert config.search_case_sensitive is True
            assert config.debug is True
            assert config.log_level == "WARNING"

    def test_log_level_is_normalized(self):
        config = LendingConfig(log_level="debug")

        assert config.log_level == "DEBUG"
        assert config.is_development is True

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LendingConfig(log_level="VERBOSE")

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            LendingConfig(default_page_size=0)

    def test_database_url_from_path(self):
        config = LendingConfig(database_path=Path("/tmp/books.db"))

        assert config.get_database_url() == "sqlite:////tmp/books.db"

    def test_relative_database_path_resolves_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = LendingConfig(database_path=Path("data/books.db"))

        expected = Path.cwd() / "data" / "books.db"
        assert config.get_database_url() == f"sqlite:///{expected}"

    def test_database_url_override(self):
        config = LendingConfig(
            database_path=Path("/tmp/books.db"),
            database_url="postgresql://lending@localhost/books",
        )

        assert config.get_database_url() == "postgresql://lending@localhost/books"


class TestConfigSingleton:
    """Test the global configuration instance."""

    def test_get_config_caches_instance(self):
        reset_config()

        assert get_config() is get_config()

    def test_set_config_installs_instance(self):
        config = LendingConfig(default_page_size=3)
        set_config(config)

        assert get_config() is config

    def test_reset_config_rereads_environment(self):
        with patch.dict(os.environ, {"BOOK_LENDING_DEFAULT_PAGE_SIZE": "7"}):
            reset_config()
            assert get_config().default_page_size == 7

        reset_config()
        assert get_config().default_page_size == 10


class TestLoggingConfiguration:
    """Test logging setup driven by configuration."""

    def test_debug_forces_debug_level(self):
        configure_logging(LendingConfig(debug=True, log_level="ERROR"))

        assert logging.getLogger().level == logging.DEBUG

    def test_configured_level(self):
        configure_logging(LendingConfig(log_level="WARNING"))

        assert logging.getLogger().level == logging.WARNING

    def test_sql_echo_enables_engine_logger(self):
        configure_logging(LendingConfig(echo_sql=True))
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

        configure_logging(LendingConfig(echo_sql=False))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
