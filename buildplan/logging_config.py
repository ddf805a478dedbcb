"""Logging setup for the buildplan command line."""

import logging
import sys

LOGGER_NAME = 'buildplan'


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Output goes to stderr so a Dockerfile printed on stdout stays clean.

    Args:
        verbose: Log classification details at DEBUG level

    Returns:
        The configured ``buildplan`` logger
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated invocations do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('[buildplan] %(levelname)s %(name)s: %(message)s'))
    logger.addHandler(handler)

    return logger
