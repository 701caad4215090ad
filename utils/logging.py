import logging
import sys
from typing import Optional

FORMAT = '%(asctime)s | %(levelname)-7s | %(name)s | %(message)s'
DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Configure a logger with human-readable format.

    Writes to ``log_file`` when given (the dashboard owns the terminal),
    otherwise to stdout.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        if log_file:
            handler = logging.FileHandler(log_file, encoding="utf-8")
        else:
            handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(FORMAT, datefmt=DATEFMT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
