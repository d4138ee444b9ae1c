"""Console logging switches for the ``tiny_mcvqe`` logger hierarchy."""

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _package_logger() -> logging.Logger:
    return logging.getLogger(__name__.split(".")[0])


def enable_logging(level=logging.INFO, stream=None):
    """Send package log records at ``level`` and above to ``stream`` (stderr)."""
    logger = _package_logger()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def disable_logging():
    logger = _package_logger()
    logger.handlers.clear()
    logger.setLevel(logging.CRITICAL + 1)
