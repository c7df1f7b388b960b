"""Logging configuration helpers."""

import logging


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the package logger and quiet httpx.

    Safe to call repeatedly; later calls only adjust the level.
    """
    logger = logging.getLogger("media_picker")
    logger.setLevel(level.upper())
    # httpx logs every request line at INFO, including capability URLs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
