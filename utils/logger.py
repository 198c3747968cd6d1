# utils/logger.py

import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Names handed out by get_logger, so set_log_level can reach all of them
_configured_loggers = set()


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger instance with the given name.

    The level comes from the LOG_LEVEL environment variable (default INFO).
    Calling this twice with the same name does not attach a second handler.

    Args:
        name (str): The name for the logger.

    Returns:
        logging.Logger: The logger instance.
    """
    logger = logging.getLogger(name)
    if name not in _configured_loggers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        try:
            level = _resolve_level(os.getenv("LOG_LEVEL", "INFO"))
        except ValueError:
            level = logging.INFO
        logger.setLevel(level)
        _configured_loggers.add(name)
    return logger


def set_log_level(level) -> None:
    """Applies a level (name or number) to every logger created through get_logger."""
    resolved = _resolve_level(level)
    for name in _configured_loggers:
        logging.getLogger(name).setLevel(resolved)
