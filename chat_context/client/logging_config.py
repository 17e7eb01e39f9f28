"""Logging configuration for client events."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import DEFAULT_LOG_FILE

LOGGER_NAME = "chat_context"


def configure_logging(log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the client logger with a rotating file handler, once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    if not logger.handlers:
        handler = RotatingFileHandler(log_file or DEFAULT_LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3)
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
