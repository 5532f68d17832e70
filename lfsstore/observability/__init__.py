"""
Observability module: Structured logging.
"""

from lfsstore.observability.logging import (
    JsonFormatter,
    KeyValueFormatter,
    LogLevel,
    StructuredLogger,
    setup_logging,
)

__all__ = [
    "JsonFormatter",
    "KeyValueFormatter",
    "LogLevel",
    "StructuredLogger",
    "setup_logging",
]
