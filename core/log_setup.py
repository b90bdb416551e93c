"""
log_setup.py - Logging Setup

Console handler for INFO (or the given level) and above, and an optional
rotating file for errors. Modules only ever call logging.getLogger(__name__).
"""

from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union
import logging
import sys

CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Marks handlers installed here so a second call replaces them
_HANDLER_TAG = "_slim_browse"


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the root logger

    Args:
        level: Console level
        log_dir: Directory for the error log file (no file if None)
        max_bytes: Max size of the error log before it rotates
        backup_count: Rotated files to keep

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(min(level, logging.ERROR))

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    setattr(console, _HANDLER_TAG, True)
    root.addHandler(console)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = RotatingFileHandler(
            log_dir / f"slim_browse_{timestamp}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        setattr(file_handler, _HANDLER_TAG, True)
        root.addHandler(file_handler)

    return root
