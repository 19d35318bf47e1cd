"""
Logging Configuration
Attaches handlers to the 'bubblepack' logger, which is silent by default.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger of the 'bubblepack' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG for per step tracing, logging.INFO for run summaries)
        log_file: Optional path to save logs to a file.
    """
    logger = logging.getLogger("bubblepack")
    logger.setLevel(level)

    # Avoid duplicate logs when called more than once
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            handler.close()
            logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
