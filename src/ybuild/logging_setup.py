"""Logging configuration for the ybuild CLI."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_console_handler: logging.Handler | None = None


def setup_logging(verbose: bool = False) -> None:
    """Setup console logging on stderr.

    Safe to call more than once; the console handler is replaced, not duplicated.

    Args:
        verbose: Log DEBUG records as well
    """
    global _console_handler

    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    if _console_handler is not None:
        root.removeHandler(_console_handler)

    _console_handler = logging.StreamHandler(sys.stderr)
    _console_handler.setLevel(level)
    _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_console_handler)
