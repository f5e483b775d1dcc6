from __future__ import annotations

import logging
import sys


# The request middleware already logs one line per call.
QUIET_LOGGERS = ("uvicorn.access",)


def configure_logging(service_name: str, level: str = "INFO") -> logging.Logger:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format=f"%(asctime)s | {service_name} | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logging.getLogger(service_name)
