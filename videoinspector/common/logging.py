# videoinspector/common/logging.py
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str = "videoinspector", level: int | str | None = None) -> logging.Logger:
    """
    Return a logger that plays nice with Uvicorn if running under it.
    If no handlers are set, we add a basicConfig once.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Set the package log level once at startup (API factory, CLI)."""
    return get_logger("videoinspector", level)
