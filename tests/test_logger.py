"""Tests for scrollsmith logging setup."""
import logging

import pytest
from rich.logging import RichHandler

from scrollsmith.core import logger as logger_module
from scrollsmith.core.logger import get_logger, set_verbose, setup_file_logging


@pytest.fixture
def package_logger():
    logger = get_logger("scrollsmith")
    yield logger
    set_verbose(False)


@pytest.fixture
def file_logging(monkeypatch):
    """File logging that is detached again after the test."""
    monkeypatch.setattr(logger_module, '_file_handler', None)
    yield setup_file_logging
    handler = logger_module._file_handler
    if handler is not None:
        logging.getLogger("scrollsmith").removeHandler(handler)
        handler.close()
    set_verbose(False)


class TestGetLogger:

    def test_module_loggers_share_one_console_handler(self, package_logger):
        first = get_logger("scrollsmith.core.generator")
        second = get_logger("scrollsmith.core.generator")

        assert first is second
        assert first.handlers == []
        rich_handlers = [h for h in package_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1

    def test_debug_is_hidden_by_default(self, package_logger):
        child = get_logger("scrollsmith.core.resolver")
        assert child.isEnabledFor(logging.INFO)
        assert not child.isEnabledFor(logging.DEBUG)


class TestVerbose:

    def test_verbose_shows_debug_on_console(self, package_logger):
        set_verbose(True)

        console_handler = next(h for h in package_logger.handlers if isinstance(h, RichHandler))
        assert console_handler.level == logging.DEBUG
        assert get_logger("scrollsmith.core.generator").isEnabledFor(logging.DEBUG)

    def test_verbose_can_be_turned_off(self, package_logger):
        set_verbose(True)
        set_verbose(False)
        assert not get_logger("scrollsmith.core.generator").isEnabledFor(logging.DEBUG)


class TestFileLogging:

    def test_records_reach_the_file(self, file_logging, tmp_path):
        log_path = file_logging(log_file=str(tmp_path / "logs" / "run.log"))

        get_logger("scrollsmith.core.generator").info("Generated file: README.md")

        assert log_path == tmp_path / "logs" / "run.log"
        content = log_path.read_text()
        assert "scrollsmith.core.generator | INFO | Generated file: README.md" in content

    def test_verbose_file_keeps_console_quiet(self, file_logging, tmp_path):
        log_path = file_logging(log_file=str(tmp_path / "run.log"), verbose=True)

        get_logger("scrollsmith.core.resolver").debug("Skipping repository central")

        assert "DEBUG | Skipping repository central" in log_path.read_text()
        console_handler = next(
            h for h in logging.getLogger("scrollsmith").handlers if isinstance(h, RichHandler)
        )
        assert console_handler.level == logging.INFO
