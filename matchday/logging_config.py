"""Logging configuration for the match ledger.

Provides a JSON formatted logger named ``matchday``. Modules log through
``logging.getLogger(__name__)`` and their records propagate to it. Every line
carries the service name plus any static context passed to :func:`get_logger`
(for example the lock timezone), and the ``league_id`` and ``match_id``
extras are lifted to the top level.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Mapping, Optional

LOG_NAME = "matchday"
LOG_FILE = Path(os.getenv("MATCHDAY_LOG_FILE", "logs/app.log"))
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5

# Record attributes set by logging itself; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}
_PROMOTED = ("league_id", "match_id")


class JsonFormatter(logging.Formatter):
    """Formatter returning log records as JSON strings."""

    def __init__(self, context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        self.context = {"service": LOG_NAME, **(context or {})}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - short description
        base: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.context,
        }

        extras = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        for key in _PROMOTED:
            value = extras.pop(key, None)
            if value is not None:
                base[key] = value
        if extras:
            base["extra"] = extras
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def get_logger(**context: Any) -> logging.Logger:
    """Return the project logger, installing handlers on first use.

    Keyword arguments become static fields on every line, e.g.
    ``get_logger(lock_timezone="Europe/London")``. They only apply to the call
    that installs the handlers.
    """
    logger = logging.getLogger(LOG_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = JsonFormatter(context)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)

    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    for handler in (stream_handler, file_handler):
        logger.addHandler(handler)
    logger.propagate = False
    return logger
