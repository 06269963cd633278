"""
Structured JSON Logging Module.

Every component receives a ``StructuredLogger`` and writes one JSON
object per line.  Log lines go to **stderr** (and a rotating file) so
they never mix with what the console prints on stdout.

Record layout::

    {"timestamp": "...", "level": "INFO", "logger_name": "session",
     "event": "LOGIN", "message": "...", "extra": {"user_id": "7"}}

``event`` is lifted out of ``extra`` because the audit trail is searched
by it.  Credential-bearing fields are masked before they are written.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

from portal.config import get_config

REDACTED: str = "***"

# Context keys whose values must never reach a log sink.
SENSITIVE_KEYS: frozenset[str] = frozenset({"password", "token", "authorization"})


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Union[str, dict[str, str]]] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
        }

        context: dict[str, str] = {}
        for key, value in record.__dict__.items():
            if key in self._STANDARD_ATTRS:
                continue
            context[key] = REDACTED if key.lower() in SENSITIVE_KEYS else str(value)

        event = context.pop("event", None)
        if event is not None:
            entry["event"] = event
        entry["message"] = record.getMessage()
        if context:
            entry["extra"] = context

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


class StructuredLogger:
    """Injectable JSON logger.

    Handlers are attached once per name; constructing a second
    ``StructuredLogger`` with the same name reuses them.  Records do not
    propagate to the root logger, so a library that configures
    ``logging.basicConfig`` cannot duplicate them onto stdout.

    Usage::

        log = StructuredLogger(name="session")
        log.info("Session restored", extra={"event": "SESSION_LOAD", "user_id": 7})
    """

    def __init__(
        self,
        name: str = "portal",
        level: Optional[Union[int, str]] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
        to_file: bool = True,
    ) -> None:
        cfg = get_config()

        resolved_level = level if level is not None else cfg.LOG_LEVEL.upper()

        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)
        self._logger.propagate = False

        if self._logger.handlers:
            return

        formatter = JSONFormatter()

        stream_handler = logging.StreamHandler(stream or sys.stderr)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        if not to_file:
            return

        resolved_log_file = log_file or cfg.LOG_FILE
        try:
            log_path = Path(resolved_log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backupCount=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s': %s. Logging to stderr only.",
                resolved_log_file,
                exc,
            )
            return
        file_handler.setFormatter(formatter)
        self._logger.addHandler(file_handler)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "portal") -> StructuredLogger:
    """Shorthand for ``StructuredLogger(name=name)`` with config defaults."""
    return StructuredLogger(name=name)
