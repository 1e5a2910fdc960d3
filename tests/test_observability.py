"""
Tests for logging setup.
"""

import logging
from pathlib import Path

from devsetup.core.observability.logging_config import _parse_level, resolve_level, setup_logging


class TestParseLevel:
    def test_names(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("WARNING") == logging.WARNING

    def test_invalid_falls_back_to_info(self):
        assert _parse_level("chatty") == logging.INFO
        assert _parse_level(None) == logging.INFO


class TestResolveLevel:
    def test_flags_win_over_env(self):
        assert resolve_level(debug=True, verbose=True, env_level="ERROR") == "DEBUG"
        assert resolve_level(verbose=True, quiet=True) == "INFO"
        assert resolve_level(quiet=True, env_level="DEBUG") == "ERROR"

    def test_env_then_default(self):
        assert resolve_level(env_level="WARNING") == "WARNING"
        assert resolve_level() == "INFO"


class TestSetupLogging:
    def test_console_level(self, restore_logging):
        setup_logging(level="ERROR")
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert len(root.handlers) == 1

    def test_file_handler_gets_own_level(self, restore_logging, tmp_path: Path):
        log_file = tmp_path / "devsetup.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG

        logging.getLogger("devsetup.test").debug("stage detail")
        for h in root.handlers:
            h.flush()
        assert "stage detail" in log_file.read_text()

    def test_leaves_other_loggers_alone(self, restore_logging, monkeypatch):
        third_party = logging.getLogger("urllib3")
        monkeypatch.setattr(third_party, "level", logging.NOTSET)
        setup_logging(level="INFO")
        assert third_party.level == logging.NOTSET
