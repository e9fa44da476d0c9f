import logging
import sys
import os
from typing import Optional

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_defaults = {"level": "INFO", "log_file": None}


def _file_handler(log_file: str) -> logging.FileHandler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(_FORMAT))
    return file_handler


def get_logger(name: str, level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Create or retrieve a logger with optional file logging.

    Args:
        name (str): Name of the logger. Names are nested under the ``goldcast``
            namespace unless they already start with it.
        level (str, optional): Logging level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
            Defaults to the level set by ``configure_logging`` (INFO).
        log_file (str, optional): Path to log file. If None, the configured
            default applies; with no default, logs only to console.

    Returns:
        logging.Logger: Configured logger instance.
    """
    if not name.startswith("goldcast"):
        name = f"goldcast.{name}"
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid adding duplicate handlers
        level = level or _defaults["level"]
        log_file = log_file or _defaults["log_file"]
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(console_handler)

        if log_file:
            logger.addHandler(_file_handler(log_file))

    return logger


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set the level (and optional log file) for every goldcast logger, including
    those already created at import time.
    """
    _defaults["level"] = level
    _defaults["log_file"] = log_file
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    for name, logger in list(logging.root.manager.loggerDict.items()):
        if not name.startswith("goldcast") or not isinstance(logger, logging.Logger):
            continue
        if not logger.handlers:
            continue
        logger.setLevel(numeric_level)
        if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            logger.addHandler(_file_handler(log_file))
