"""
Process-wide logging setup.

Every module logs through `logging.getLogger(__name__)`; this module only
decides where records go. The calendar screen owns the terminal, so when it is
in use logs should be sent to a file (`FLOWLOG_LOG_FILE`).
"""
from __future__ import annotations

import logging

from flowlog.core.config import Settings

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings, level: str | None = None) -> None:
    """Install the root handler once. Later calls are no-ops."""
    root = logging.getLogger()
    if root.handlers:
        return

    name = (level or settings.LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    if settings.LOG_FILE:
        logging.basicConfig(filename=settings.LOG_FILE, level=numeric, format=_FORMAT)
    else:
        logging.basicConfig(level=numeric, format=_FORMAT)
