from __future__ import annotations

import logging

from preview_edge.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(namespace: str = "preview_edge") -> logging.Logger:
    """Give the package loggers their own stdout handler.

    uvicorn owns the root handlers, so *namespace* does not propagate.
    Calling this twice does not add a second handler.
    """
    log = logging.getLogger(namespace)
    log.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.propagate = False
    return log
