"""
Unit tests for logging configuration
"""

import logging

from core.logging import setup_logging


def test_noisy_loggers_are_quieted():
    setup_logging()

    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.pool").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
