"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "focusguard"
_LOG_FILE = "focusguard.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def _log_dir() -> Path:
    override = os.environ.get("FOCUSGUARD_LOG_DIR")
    if override:
        return Path(override)
    return Path(user_log_dir(_APP_NAME))


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, initialising it on first call.

    With *name*, a child logger of the application logger is returned so
    records keep the module name while sharing the rotating file handler.
    """
    global _logger
    if _logger is None:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            log_dir / _LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

        logger = logging.getLogger(_APP_NAME)
        logger.setLevel(logging.DEBUG)
        if not logger.handlers:
            logger.addHandler(handler)
        logger.propagate = False

        _logger = logger

    if name is None or name == _APP_NAME:
        return _logger
    if name.startswith(f"{_APP_NAME}."):
        name = name[len(_APP_NAME) + 1 :]
    return _logger.getChild(name)
