"""
Structured Logging for Store Operations

Every store call logs one line with keyword fields (fn, oid, key, ...).
Two renderings of the same record:
- JSON lines for log aggregation (ELK, Loki)
- key=value text for terminals

Fields bound with `StructuredLogger.context()` ride along on every line
emitted inside the block, across threads started with copy_context().
Credential-looking fields are masked before rendering.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Iterator, Optional, TextIO


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, name: str) -> LogLevel:
        """Parse a level name, defaulting to INFO."""
        return cls.__members__.get(name.strip().upper(), cls.INFO)


_bound_fields: ContextVar[Dict[str, Any]] = ContextVar("lfsstore_log_fields", default={})

# Attributes of a bare logging.LogRecord; everything else was passed as a field
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_MASKED_FIELDS = frozenset({
    "access_key_id",
    "secret_access_key",
    "session_token",
    "aws_access_key_id",
    "aws_secret_access_key",
    "aws_session_token",
})

_MASK = "***"


def record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Bound context plus per-call fields of a record, credentials masked."""
    fields = dict(_bound_fields.get())
    fields.update(
        (name, value) for name, value in record.__dict__.items() if name not in _RECORD_ATTRS
    )
    for name in _MASKED_FIELDS.intersection(fields):
        if fields[name]:
            fields[name] = _MASK
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class KeyValueFormatter(logging.Formatter):
    """
    Human-readable line with fields appended as key=value.

        2024-05-01 12:00:00,000 | INFO     | lfsstore.storage.s3_store | Stored object oid=6ae8... size=12
    """

    def __init__(self) -> None:
        super().__init__("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = record_fields(record)
        if not fields:
            return line
        rendered = " ".join(f"{name}={value}" for name, value in fields.items())
        # Keep any traceback on the lines after the fields
        head, sep, tail = line.partition("\n")
        return f"{head} {rendered}{sep}{tail}"


class StructuredLogger:
    """
    Logger taking fields as keyword arguments.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Stored object", oid=meta.oid, key=key, size=meta.size)

        with StructuredLogger.context(request_id=rid):
            store.put(meta, body)
    """

    __slots__ = ("_logger", "_fields")

    def __init__(self, name: str, level: Optional[LogLevel] = None) -> None:
        self._logger = logging.getLogger(name)
        if level is not None:
            self._logger.setLevel(level.value)
        self._fields: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.ERROR, message, fields)

    def bind(self, **fields: Any) -> StructuredLogger:
        """Logger with the same name that adds fields to every call."""
        child = StructuredLogger(self._logger.name)
        child._fields = {**self._fields, **fields}
        return child

    def _emit(self, level: LogLevel, message: str, fields: Dict[str, Any]) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra={**self._fields, **fields})

    @staticmethod
    @contextmanager
    def context(**fields: Any) -> Iterator[None]:
        """Bind fields to every record logged inside the block."""
        token = _bound_fields.set({**_bound_fields.get(), **fields})
        try:
            yield
        finally:
            _bound_fields.reset(token)


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Install a single root handler.

    Args:
        level: Minimum log level
        json_output: JSON lines instead of key=value text
        stream: Output stream (default: stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else KeyValueFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # boto logs every request at DEBUG
    for noisy in ("botocore", "boto3", "urllib3", "s3transfer"):
        logging.getLogger(noisy).setLevel(max(level, LogLevel.WARNING))
