"""
Logging setup.

All modules log through the "workpulse" logger hierarchy.
"""

import logging
import sys

from workpulse.core.config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "workpulse"


def setup_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a configured logger.

    The root "workpulse" logger gets a single stdout handler; child loggers
    propagate to it.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(get_settings().LOG_LEVEL.upper())

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return root.getChild(name)


logger = setup_logger()
