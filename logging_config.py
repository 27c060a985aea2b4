"""
logging_config.py
Shared "membresias" logger writing to the console; modules take a child via get_logger(name).
"""

import logging
import sys

from config import settings

logger = logging.getLogger("membresias")
logger.setLevel(settings.LOG_LEVEL.upper())

_formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Console (one handler per process)
if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_formatter)
    logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"membresias.{name}")
