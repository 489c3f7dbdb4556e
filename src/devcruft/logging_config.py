"""Logging configuration for devcruft.

Log records go to stderr through rich so they never mix with the project
tables printed on stdout.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "devcruft"


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """
    Configure the devcruft logger with a rich handler.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging

    Returns:
        The configured ``devcruft`` logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Repeated CLI invocations in one process must not stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
