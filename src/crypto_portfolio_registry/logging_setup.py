"""Logging configuration for the CLI and the price proxy."""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "crypto_portfolio_registry"


def setup_logging(debug: bool = False, console: Console | None = None) -> logging.Logger:
    """
    Attach a rich handler to the package logger.

    Calling it again only updates the level.

    Parameters
    ----------
    debug : bool
        Log at DEBUG instead of INFO
    console : Console | None
        Console to write to (defaults to stderr)

    Returns
    -------
    logging.Logger
        The package logger

    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=debug,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
