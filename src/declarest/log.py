"""Logging setup for applications embedding declarest.

Every module logs through ``logging.getLogger(__name__)`` under the
``declarest`` namespace and installs no handlers of its own.
:func:`configure_logging` is an opt-in helper that routes those records to
stderr through Rich, honouring ``NO_COLOR`` and ``TERM=dumb``.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "declarest"


def _should_disable_color() -> bool:
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Attach a Rich stderr handler to the ``declarest`` logger.

    Args:
        verbose: Log at DEBUG, which includes wire logging.
        quiet: Only log errors. Wins over *verbose*.

    Returns:
        The configured ``declarest`` logger.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    console = Console(stderr=True, no_color=_should_disable_color())
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
