"""Centralized logging configuration for clipmix"""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from .config import LOG_DIR, LOG_LEVEL
from .utils import get_timestamp


def configure_logging(log_level: Optional[str] = None, file_logging: bool = True) -> Optional[Path]:
    """
    Configure console and file logging for the clipmix package.

    Returns:
        Path of the session log file, or None when file logging is off
    """
    level = logging._nameToLevel.get((log_level or LOG_LEVEL).upper(), logging.INFO)
    logger = logging.getLogger("clipmix")
    logger.setLevel(level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(show_path=False, rich_tracebacks=True)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    log_file = None
    if file_logging:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOG_DIR / f"clipmix_{get_timestamp('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        # The file keeps everything, the console only the chosen level
        file_handler.setLevel(logging.DEBUG)
        console_handler.setLevel(level)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
