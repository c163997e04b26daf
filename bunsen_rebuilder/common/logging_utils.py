"""
Logging utilities for the rebuilder
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'


def get_log_file(log_dir, category: str) -> Path:
    """Run log for one logical run category (upgrade, add, ...)"""
    return Path(log_dir).expanduser() / f"{category}.log"


def setup_logging(log_file=None, debug_mode=False):
    """Setup logging configuration

    Console output always; when log_file is given, the session is appended to it.
    """
    level = logging.DEBUG if debug_mode else logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt='%H:%M:%S',
        handlers=handlers,
        force=True,
    )

    return logging.getLogger('bunsen_rebuilder')

