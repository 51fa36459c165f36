"""Utilities shared by the ICMP prober components."""

import logging

from icmp_prober import logger_main


def get_prober_logger() -> logging.Logger:
    """Get the default logger for the prober components.

    The logger is a child of the package logger, so it picks up whatever
    handlers `setup_logger` installed on it.

    Returns:
        logging.Logger: The `<logger_main>.prober` logger.
    """
    return logging.getLogger(f"{logger_main}.prober")


def resolve_logger(logger: logging.Logger | None) -> logging.Logger:
    """Return the injected logger, or the default prober logger if none was given."""
    if logger is not None:
        return logger
    return get_prober_logger()
