"""Tests for logging setup."""

import logging

from rich.logging import RichHandler

from crypto_portfolio_registry.logging_setup import PACKAGE_LOGGER, setup_logging


def test_setup_logging_levels_and_idempotence():
    """Repeated calls adjust the level without stacking handlers."""
    logger = setup_logging(debug=True)
    assert logger.level == logging.DEBUG

    logger = setup_logging(debug=False)
    assert logger.level == logging.INFO

    handlers = [h for h in logging.getLogger(PACKAGE_LOGGER).handlers if isinstance(h, RichHandler)]
    assert len(handlers) == 1
