"""Logging setup for the catalog backend: one stdout handler on the root logger."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Libraries that log every multipart part or file chunk at DEBUG
_NOISY_LOGGERS = ("multipart", "python_multipart", "aiofiles")

_handler: Optional[logging.Handler] = None


def setup_logging(level: str = "INFO") -> None:
    """Send logs to stdout at ``level``. Every app built calls this; the handler is added once."""
    global _handler
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(_handler)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
