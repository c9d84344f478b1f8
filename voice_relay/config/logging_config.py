"""
Configure logging for the relay.

This module provides a consistent logging configuration across the entire
application, so messages from the gateway, the upstream sessions and the
HTTP layer share one format and one set of outputs.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from voice_relay.config.constants import LOGGER_NAME

# Log levels
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Log file configuration
LOG_DIR = Path("logs")
LOG_FILE = LOG_DIR / "voice_relay.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the relay logger with console and rotating file handlers.

    Args:
        level: Optional level name overriding the LOG_LEVEL environment variable

    Returns:
        logging.Logger: The configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    # Reconfiguring must not stack duplicate handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        LOG_DIR.mkdir(exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not set up file logging: {e}")

    logger.propagate = False

    logger.info("Logging configured")
    return logger
