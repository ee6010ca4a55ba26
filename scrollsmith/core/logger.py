"""Logging for scrollsmith: one package logger with a Rich console handler.

Module loggers obtained through :func:`get_logger` are children of the
``scrollsmith`` logger and hold no handlers of their own, so the console
verbosity and an optional log file are configured in one place.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "scrollsmith"

console = Console(stderr=True)

LOG_DIR = Path.home() / ".scrollsmith"
LOG_FILE = LOG_DIR / "scrollsmith.log"

_console_handler: Optional[RichHandler] = None
_file_handler: Optional[logging.FileHandler] = None


def _package_logger() -> logging.Logger:
    global _console_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _console_handler is None:
        _console_handler = RichHandler(console=console, show_path=False)
        _console_handler.setFormatter(logging.Formatter("%(message)s"))
        _console_handler.setLevel(logging.INFO)
        logger.addHandler(_console_handler)
        logger.setLevel(logging.INFO)
    return logger


def _sync_level(logger: logging.Logger) -> None:
    # The logger lets through whatever its most verbose handler wants
    logger.setLevel(min(handler.level for handler in logger.handlers))


def set_verbose(verbose: bool) -> None:
    """Show debug records on the console, or go back to info and above."""
    logger = _package_logger()
    _console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    _sync_level(logger)


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Also write scrollsmith records to a log file.

    Only the first call attaches a file; later calls change its level.

    Args:
        log_file: Path to log file (defaults to ~/.scrollsmith/scrollsmith.log)
        verbose: Write debug records too

    Returns:
        The file being written
    """
    global _file_handler

    logger = _package_logger()
    level = logging.DEBUG if verbose else logging.INFO

    if _file_handler is None:
        target_log_file = Path(log_file) if log_file else LOG_FILE
        try:
            target_log_file.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            target_log_file = Path("/tmp/scrollsmith.log")

        _file_handler = logging.FileHandler(target_log_file)
        _file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(_file_handler)

    _file_handler.setLevel(level)
    _sync_level(logger)
    log_path = Path(_file_handler.baseFilename)
    logger.debug(f"Logging to {log_path}")
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Get a logger whose records reach the scrollsmith console handler.

    Args:
        name: Logger name (typically __name__)
    """
    _package_logger()
    return logging.getLogger(name)
