"""Logging configuration for EduRelay."""

import contextvars
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

# Object key of the upload being handled in the current request
object_key_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "object_key", default=None
)

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "google.auth")


class JsonLogFormatter(logging.Formatter):
    """One JSON document per line, for log collectors.

    Extra fields passed with ``logger.info(..., extra={...})`` are copied
    into the document. Exceptions are rendered as a single string.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        object_key = object_key_context.get()
        if object_key:
            log_entry["object_key"] = object_key

        log_entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        )

        if record.exc_info:
            log_entry.update(self._exception_fields(record.exc_info))

        return json.dumps(log_entry, default=str, ensure_ascii=False)

    @staticmethod
    def _exception_fields(exc_info) -> Dict[str, str]:
        exc_type, exc_value, _ = exc_info
        return {
            "exception": "".join(traceback.format_exception(*exc_info)),
            "exception_type": exc_type.__name__ if exc_type else "Unknown",
            "exception_message": str(exc_value) if exc_value else "",
        }


def _resolve_level(settings) -> int:
    if settings.ENV == "local":
        return logging.DEBUG
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(settings=None) -> None:
    """Send all logs to stdout.

    Local development gets plain text at DEBUG. Every other environment gets
    JSON lines at ``LOG_LEVEL``. uvicorn's loggers share the same handler.
    """
    if settings is None:
        from edurelay.core.config import settings

    log_level = _resolve_level(settings)

    handler = logging.StreamHandler(sys.stdout)
    if settings.ENV == "local":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        server_logger = logging.getLogger(logger_name)
        server_logger.setLevel(log_level)
        server_logger.handlers[:] = [handler]
        server_logger.propagate = False

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.INFO))
