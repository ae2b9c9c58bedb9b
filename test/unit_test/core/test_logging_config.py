"""Unit tests for the logging configuration module."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from modgate_ai.core import logging_config
from modgate_ai.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    return next(h for h in root_logger.handlers if type(h) is logging.StreamHandler)


class TestSetupLogging:
    """Test setup_logging levels, formats and handlers."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_handler_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)
        assert _console_handler().level == expected_level

    @pytest.mark.parametrize(
        "log_format,expected",
        [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("json", JSON_FORMAT), ("unknown", DETAILED_FORMAT)],
    )
    def test_formats(self, log_format, expected):
        setup_logging(log_level="INFO", log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        assert len(logging.getLogger().handlers) == 1

    def test_module_levels_are_applied(self):
        setup_logging(enable_file=False)
        for name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(name).level == logging.getLevelName(level)

    def test_file_logging_when_enabled(self, tmp_path: Path):
        with patch.object(logging_config, "ENABLE_FILE_LOGGING", True), patch.object(
            logging_config, "LOG_FILE_DIR", str(tmp_path)
        ):
            setup_logging(log_level="INFO", enable_file=True)
            file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) == 1
            assert Path(file_handlers[0].baseFilename) == tmp_path / "modgate_ai.log"
            file_handlers[0].close()
        setup_logging(enable_file=False)

    def test_file_logging_needs_global_switch(self, tmp_path: Path):
        with patch.object(logging_config, "ENABLE_FILE_LOGGING", False), patch.object(
            logging_config, "LOG_FILE_DIR", str(tmp_path)
        ):
            setup_logging(enable_file=True)
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)


def test_get_logger_returns_named_logger():
    logger = get_logger("modgate_ai.agent_core.dispatch.dispatcher")
    assert logger.name == "modgate_ai.agent_core.dispatch.dispatcher"
    assert logger is logging.getLogger("modgate_ai.agent_core.dispatch.dispatcher")
