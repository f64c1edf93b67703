"""
logger.py
---------
Structured, application-wide logging configuration.

Design Decisions:
    * A single root logger ("dbtransfer") is configured once at import time.
    * All modules obtain a child logger via ``get_logger(__name__)``.
    * Optional file handler appends structured lines to a persistent log
      file (path set via LOG_FILE env variable).
    * Command-line verbosity is translated to a log level by
      ``apply_verbosity``; Silent switches console output off entirely.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from config import CONFIG, get_log_level
from models.options import Verbosity

_ROOT_LOGGER_NAME = "dbtransfer"
_CONSOLE_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Above CRITICAL, so nothing gets through.
_SILENT = logging.CRITICAL + 10

_VERBOSITY_LEVELS: dict[Verbosity, int] = {
    Verbosity.SILENT: _SILENT,
    Verbosity.QUIET: logging.ERROR,
    Verbosity.NORMAL: logging.INFO,
    Verbosity.DETAILED: logging.DEBUG,
    Verbosity.DEBUG: logging.DEBUG,
}

_configured = False
_console_handler: logging.Handler | None = None


def _configure_root_logger() -> None:
    """One-time setup of the root 'dbtransfer' logger and its handlers."""
    global _configured, _console_handler
    if _configured:
        return
    _configured = True

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(get_log_level())

    # --- Console handler ---
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(get_log_level())
    console_handler.setFormatter(
        logging.Formatter(fmt=_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )
    root.addHandler(console_handler)
    _console_handler = console_handler

    # --- Optional file handler ---
    if CONFIG.transfer.log_file:
        log_path = Path(CONFIG.transfer.log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            file_handler.setFormatter(
                logging.Formatter(fmt=_FILE_FORMAT, datefmt=_DATE_FORMAT)
            )
            root.addHandler(file_handler)
        except OSError as exc:
            root.warning("Could not create log file '%s': %s", log_path, exc)


_configure_root_logger()


def verbosity_level(verbosity: Verbosity) -> int:
    """Return the logging level that corresponds to *verbosity*."""
    return _VERBOSITY_LEVELS.get(verbosity, logging.INFO)


def apply_verbosity(verbosity: Verbosity) -> None:
    """
    Re-level the console output for one command invocation.

    Debug verbosity also switches the console to the detailed
    (file/line) format used by the log file.
    """
    level = verbosity_level(verbosity)
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(min(level, logging.DEBUG) if CONFIG.transfer.log_file else level)
    if _console_handler is not None:
        _console_handler.setLevel(level)
        fmt = _FILE_FORMAT if verbosity is Verbosity.DEBUG else _CONSOLE_FORMAT
        _console_handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=_DATE_FORMAT))


def get_logger(name: str) -> logging.Logger:
    """
    Return a child logger scoped to the given name.

    Args:
        name: Typically ``__name__`` of the calling module.

    Returns:
        A :class:`logging.Logger` instance under the 'dbtransfer' hierarchy.

    Example::

        log = get_logger(__name__)
        log.info("Operation started")
        log.error("Fatal error", exc_info=True)
    """
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
