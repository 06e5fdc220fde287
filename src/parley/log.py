"""Logging setup for applications built on parley.

Every module logs through ``logging.getLogger(__name__)``; nothing is
emitted until the application configures logging. :func:`setup_logging`
is the convenience used by the ``parley`` CLI: it routes the ``parley``
logger hierarchy to stderr through :class:`rich.logging.RichHandler`,
honouring ``NO_COLOR``.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "parley"


def setup_logging(verbose: bool = False, no_color: bool = False) -> logging.Logger:
    """Install a :class:`~rich.logging.RichHandler` on the ``parley`` logger.

    Calling it again replaces the previously installed handler instead of
    stacking a second one.

    Args:
        verbose: Log at DEBUG instead of INFO.
        no_color: Disable colour even on a TTY.

    Returns:
        The configured ``parley`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    console = Console(
        stderr=True,
        no_color=no_color or "NO_COLOR" in os.environ,
    )
    handler = RichHandler(console=console, show_path=verbose, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
