"""Logging setup for gcp-switcher.

Modules use the standard pattern:

    import logging
    logger = logging.getLogger(__name__)

and this module decides where those records go. The TUI owns the terminal,
so nothing is ever written to the console; with --debug records go to a
rotating log file, otherwise they are discarded.
"""

import logging
from logging.handlers import RotatingFileHandler

from ..config.settings import SwitcherConfig

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2

PACKAGE_LOGGER = "gcp_switcher"


def setup_logging(config: SwitcherConfig) -> logging.Logger:
    """Configure the package logger from the debug flag in config.

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Keep records away from the root logger's stderr handler under the TUI
    logger.propagate = False

    if not config.debug:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
        return logger

    config.log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        config.log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.info("=== GCP Switcher Started ===")
    return logger
