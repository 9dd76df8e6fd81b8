"""Logging configuration for keynote-file.

The library keeps its loguru output disabled until an application opts in,
so embedding code does not get parser chatter on stderr.
"""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Enable keynote_file logging on stderr at the requested level."""
    logger.remove()
    logger.enable("keynote_file")
    if verbose:
        logger.add(sys.stderr, level="DEBUG", format="{level.icon} {name}: {message}")
    else:
        level = "WARNING" if quiet else "INFO"
        logger.add(sys.stderr, level=level, format="{level.icon} {message}")
