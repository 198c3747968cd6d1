# tests/test_logger.py

import logging

import pytest

from utils.logger import get_logger, set_log_level


def test_get_logger_does_not_duplicate_handlers():
    first = get_logger("test_logger_dupes")
    second = get_logger("test_logger_dupes")

    assert first is second
    assert len(second.handlers) == 1


def test_set_log_level_reaches_existing_loggers():
    logger = get_logger("test_logger_level")

    set_log_level("DEBUG")
    assert logger.level == logging.DEBUG

    set_log_level("info")
    assert logger.level == logging.INFO


def test_set_log_level_rejects_unknown_names():
    with pytest.raises(ValueError):
        set_log_level("LOUD")
