# utils.py
import logging
import os
import sys

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def resolve_level(level: str = None) -> str:
    level = (level or os.getenv("LOG_LEVEL") or "WARNING").upper()
    return level if level in LOG_LEVELS else "WARNING"


def setup_logger(name: str = "slack_thread_export", level: str = None) -> logging.Logger:
    logger = logging.getLogger(name)

    # Level is fixed when the handler is attached; set_log_level changes it later
    if not logger.handlers:
        logger.setLevel(resolve_level(level))
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s", "%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def set_log_level(level: str) -> None:
    """Apply a level to every logger created through setup_logger."""
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and logger.handlers:
            logger.setLevel(resolve_level(level))
