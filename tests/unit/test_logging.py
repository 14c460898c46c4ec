from __future__ import annotations

import logging

import pytest

from getgive.config import ConfigError, LoggingConfig
from getgive.logging import ConsoleFormatter, configure_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord("getgive.test", level, __file__, 1, message, None, None)


def test_console_formatter_prefixes_symbol():
    formatter = ConsoleFormatter(use_color=False)

    assert formatter.format(_record(logging.WARNING, "careful")) == "! careful"
    assert formatter.format(_record(logging.DEBUG, "detail")) == "D detail"


def test_console_formatter_colours_when_enabled():
    formatter = ConsoleFormatter(use_color=True)

    rendered = formatter.format(_record(logging.ERROR, "failed"))

    assert rendered.startswith("\x1b[31mX")
    assert rendered.endswith("failed")


def test_configure_logging_sets_level(restore_root_logger):
    configure_logging(LoggingConfig(level="info"))

    assert restore_root_logger.level == logging.INFO
    assert len(restore_root_logger.handlers) == 1


def test_verbose_forces_debug(restore_root_logger):
    configure_logging(LoggingConfig(level="error"), verbose=True)

    assert restore_root_logger.level == logging.DEBUG


def test_log_file_records_debug_output(restore_root_logger, tmp_path):
    log_file = tmp_path / "logs" / "getgive.log"
    configure_logging(LoggingConfig(level="warning", file=log_file))

    logging.getLogger("getgive.loader").debug("Running %s", "main.py")
    for handler in restore_root_logger.handlers:
        handler.flush()

    console, file_handler = restore_root_logger.handlers
    assert console.level == logging.WARNING
    assert file_handler.level == logging.DEBUG
    assert "Running main.py" in log_file.read_text(encoding="utf-8")


def test_unknown_level_raises_config_error(restore_root_logger):
    with pytest.raises(ConfigError):
        configure_logging(LoggingConfig(level="chatty"))
