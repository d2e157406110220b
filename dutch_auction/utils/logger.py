"""
Logging for the auction house.

Every module logs through a child of the `dutch_auction` logger. Console
output is colored by colorlog; an optional plain-text file mirrors it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

ROOT_LOGGER = "dutch_auction"
LOG_FILE = "dutch_auction.log"

CONSOLE_FORMAT = "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"
FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
DATE_FORMAT = "%H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class AuctionLogger:
    """Owns the handlers attached to the `dutch_auction` logger."""

    _configured = False

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
    ):
        """
        Attach handlers once per process (until reset).

        Args:
            level: Threshold for every handler
            log_dir: Directory for LOG_FILE. None = ./logs
            log_to_file: Also write to LOG_FILE
        """
        if cls._configured:
            return

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(level)

        console = colorlog.StreamHandler(sys.stdout)
        console.setFormatter(colorlog.ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS))
        root.addHandler(console)

        if log_to_file:
            directory = Path(log_dir or "logs")
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(directory / LOG_FILE)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
            root.addHandler(file_handler)

        cls._configured = True

    @classmethod
    def reset(cls) -> None:
        """Close and drop the handlers so setup() can run again."""
        root = logging.getLogger(ROOT_LOGGER)
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        cls._configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger for one subsystem, e.g. get_logger("registry")."""
    AuctionLogger.setup()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
):
    """Replace any earlier logging setup."""
    AuctionLogger.reset()
    AuctionLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file)
