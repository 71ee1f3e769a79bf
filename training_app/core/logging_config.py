import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO"):
    """
    Configure the root logger with a single stdout handler.
    Safe to call more than once (no duplicate handlers).
    """
    root = logging.getLogger()
    handler = None
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout:
            handler = h
            break
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        root.addHandler(handler)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.setLevel(level.upper())
    return root
