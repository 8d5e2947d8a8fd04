import logging
import sys

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    # Don't double-add handlers when called again
    if getattr(root, "_vodsync_configured", False):
        return
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(FORMAT, datefmt=DATEFMT))
    root.addHandler(h)
    root._vodsync_configured = True
