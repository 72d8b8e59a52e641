import logging
import sys

from groundwater_engine.config.settings import LOG_LEVEL

def setup_logger(name: str = "groundwater_engine", level=None):
    """
    Sets up a logger that outputs to Console (stdout).
    Child loggers (logging.getLogger(__name__)) propagate into this one.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or getattr(logging, LOG_LEVEL, logging.INFO))

    # Avoid duplicate logs if setup is called multiple times
    if logger.hasHandlers():
        return logger

    # Format: timestamp - level - message
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    return logger
