"""
Logging setup for walkthrough runs.

Console output goes to stdout. Set LOG_LEVEL to change the console level and
WALKTHRU_LOG_FILE to also write a plain-text log file.
"""

import logging
import os
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)-7s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _create_logger() -> logging.Logger:
    _logger = logging.getLogger("walkthru")
    _logger.setLevel(logging.DEBUG)
    if _logger.handlers:
        return _logger

    console_level = getattr(
        logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO
    )
    fmt = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    _logger.addHandler(console)

    log_file = os.getenv("WALKTHRU_LOG_FILE", "").strip()
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        _logger.addHandler(file_handler)

    return _logger


logger = _create_logger()
