from __future__ import annotations

import logging
import sys

# Parent of every module logger in this package, whatever the import root.
PACKAGE_LOGGER = __name__.rsplit(".", 2)[0]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stdout handler to the package logger.

    Safe to call more than once (app factory in tests).
    """
    log = logging.getLogger(PACKAGE_LOGGER)
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
