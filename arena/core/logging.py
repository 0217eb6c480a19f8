"""Logging setup for the arena application."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False

def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``arena`` logger.

    Safe to call more than once; later calls only adjust the level.
    """
    global _configured

    logger = logging.getLogger("arena")
    logger.setLevel(level.upper())

    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True
