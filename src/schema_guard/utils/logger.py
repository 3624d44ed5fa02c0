import logging
import sys
import os
from typing import Optional
from schema_guard.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "app.log"


def _log_file() -> Optional[str]:
    """
    Path of the shared log file, creating its directory on first use.
    An empty LOG_DIR means console-only logging.
    """
    if not settings.LOG_DIR:
        return None
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    return os.path.join(settings.LOG_DIR, LOG_FILE_NAME)


def get_logger(name: str) -> logging.Logger:
    """
    Configures and returns a logger instance with the specified name.
    """
    logger = logging.getLogger(name)

    # Avoid adding multiple handlers if logger is already configured
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = _log_file()
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
