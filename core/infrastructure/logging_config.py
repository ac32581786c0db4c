"""Logging configuration for the application."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "chatdesk.log"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _parse_level(value: Optional[str], default: int) -> int:
    if not value:
        return default
    return _LEVELS.get(value.upper(), default)


def _install_excepthook() -> None:
    if getattr(_install_excepthook, "_installed", False):
        return

    def handle_exception(exc_type, exc, tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        logging.getLogger("uncaught").critical(
            "Unhandled exception", exc_info=(exc_type, exc, tb)
        )

    sys.excepthook = handle_exception
    _install_excepthook._installed = True


def configure_logging(
    log_dir: Optional[Path] = None,
    level: Optional[str] = None,
) -> Optional[Path]:
    """Send log records to the console and a rotating file under ``log_dir``.

    Calling it again replaces the handlers installed by the previous call.
    Returns the log file path, or None when the directory is not writable.
    """
    log_dir = log_dir or (Path.home() / ".chatdesk" / "logs")
    log_file: Optional[Path] = log_dir / LOG_FILE_NAME
    level_value = _parse_level(level or os.getenv("CHATDESK_LOG_LEVEL"), logging.INFO)

    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    handlers: list[logging.Handler] = []
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError:
        log_file = None

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    logging.basicConfig(level=level_value, handlers=handlers, force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level_value, logging.WARNING))
    _install_excepthook()

    logging.getLogger(__name__).debug("Logging initialized at %s", log_file)
    return log_file
