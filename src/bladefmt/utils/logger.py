"""Minimal logging utilities for bladefmt.

Provides a simple get_logger function that wraps the standard library logging.
The library never installs handlers; applications configure output.

Example:
    >>> from bladefmt.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Scanned %d tokens", 42)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "bladefmt." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("guard")
        >>> logger.name
        'bladefmt.guard'
    """
    if not (name == "bladefmt" or name.startswith("bladefmt.")):
        name = f"bladefmt.{name}"
    return logging.getLogger(name)
