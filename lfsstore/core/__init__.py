"""
Core module: Type definitions, error hierarchy, and constants.

This module provides the foundational abstractions for the store:
- Result/Either monads for zero-exception control flow
- Error hierarchy with one class per failure kind
- Content identity types (ContentHash, MetaObject)
"""

from lfsstore.core.types import (
    Result,
    Ok,
    Err,
    ContentHash,
    MetaObject,
)
from lfsstore.core.errors import (
    ErrorCode,
    LfsStoreError,
    IntegrityError,
    SizeMismatchError,
    HashMismatchError,
    ContentSourceError,
    NotFoundError,
    BackendError,
    BackendWriteError,
    BackendReadError,
    BackendUnavailableError,
    ConfigError,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "ContentHash",
    "MetaObject",
    "ErrorCode",
    "LfsStoreError",
    "IntegrityError",
    "SizeMismatchError",
    "HashMismatchError",
    "ContentSourceError",
    "NotFoundError",
    "BackendError",
    "BackendWriteError",
    "BackendReadError",
    "BackendUnavailableError",
    "ConfigError",
]
