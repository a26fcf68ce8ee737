import logging
import sys
from typing import Optional
from logscope.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
ROOT_LOGGER = "logscope"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the package logger once; repeated calls only adjust the level."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel((level or settings.log_level).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
