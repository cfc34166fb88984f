"""Logging setup for the API service."""

import logging

LOG_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s message=\"%(message)s\""


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    root_logger.setLevel(level.upper())
