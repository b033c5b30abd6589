"""Logging configuration helpers."""

import logging

_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging with a single stream handler.

    Repeated calls only adjust the level.
    """
    logger = logging.getLogger("nutrition_planner")
    logger.setLevel(level.upper())
    # httpx logs every provider and webhook request line at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
