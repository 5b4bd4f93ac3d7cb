import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO"):
    """Install a single stream handler on the root logger"""
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Avoid stacking handlers when the app factory runs more than once
    for handler in root.handlers:
        if getattr(handler, "_privatediary", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._privatediary = True
    root.addHandler(handler)
