"""
Logging helpers for glasscast.

Modules get their logger with `logging.getLogger(__name__)`; entry points
call `setup_default_logging` to install a minimal configuration once.
"""
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_default_logging(level="INFO"):
    """
    Apply a basic logging configuration unless one already exists.

    Does nothing when the root logger already has handlers.
    """
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
