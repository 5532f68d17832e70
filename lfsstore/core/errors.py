"""
Error Hierarchy for the LFS Content Store

Design Principles:
- Expected failures are returned as Err values, not raised
- Every error kind is a distinct class so callers can branch on type
- Carry full error context for debugging and audit trails

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause for root cause analysis
- Timestamp for correlation with backend logs

Usage:
    result = store.put(meta, data)
    match result:
        case Ok(_):
            acknowledge()
        case Err(HashMismatchError() as e):
            reject(e)
        case Err(BackendError() as e):
            retry_later(e)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Integrity errors (detected locally, never retried)
    - 2xxx: Lookup errors
    - 3xxx: Backend transport/service errors
    - 4xxx: Caller byte source errors
    - 9xxx: Configuration errors
    """

    # Integrity errors (1xxx)
    INTEGRITY_SIZE_MISMATCH = 1001
    INTEGRITY_HASH_MISMATCH = 1002

    # Lookup errors (2xxx)
    OBJECT_NOT_FOUND = 2001

    # Backend errors (3xxx)
    BACKEND_READ_FAILED = 3001
    BACKEND_WRITE_FAILED = 3002
    BACKEND_UNAVAILABLE = 3003

    # Source errors (4xxx)
    SOURCE_READ_FAILED = 4001

    # Configuration errors (9xxx)
    CONFIG_SESSION_FAILED = 9001
    CONFIG_BUCKET_UNREACHABLE = 9002


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class LfsStoreError(Exception):
    """
    Base class for all content store errors.

    Provides common infrastructure for error handling:
    - Unique error ID for tracing a failure across log lines
    - Error code for programmatic handling
    - Timestamp for correlation
    - Cause for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp_ns: int = field(default_factory=time.time_ns)
    cause: Optional[Exception] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize error to dictionary for logging.

        The cause is reduced to its string form.
        """
        data = {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp_ns": self.timestamp_ns,
            "context": self.context,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# INTEGRITY ERRORS (WRITE PATH, LOCALLY DETECTED)
# =============================================================================
@dataclass
class IntegrityError(LfsStoreError):
    """
    Content rejected before it reached the backend.

    Raised by the verification step of put. Never retried.
    """

    @classmethod
    def size_mismatch(
        cls,
        oid: str,
        declared_size: int,
        actual_size: int,
    ) -> SizeMismatchError:
        """Content length disagrees with declared size."""
        return SizeMismatchError(
            code=ErrorCode.INTEGRITY_SIZE_MISMATCH,
            message=f"Size mismatch for {oid}: declared {declared_size}B, read {actual_size}B",
            context={"oid": oid, "declared_size": declared_size, "actual_size": actual_size},
        )

    @classmethod
    def hash_mismatch(
        cls,
        oid: str,
        actual_oid: str,
    ) -> HashMismatchError:
        """Content hash disagrees with declared oid."""
        return HashMismatchError(
            code=ErrorCode.INTEGRITY_HASH_MISMATCH,
            message=f"Hash mismatch: declared {oid}, computed {actual_oid}",
            context={"oid": oid, "actual_oid": actual_oid},
        )


@dataclass
class SizeMismatchError(IntegrityError):
    """Bytes read from the source differ in count from the declared size."""


@dataclass
class HashMismatchError(IntegrityError):
    """SHA-256 of the bytes read differs from the declared oid."""


# =============================================================================
# LOOKUP ERRORS
# =============================================================================
@dataclass
class NotFoundError(LfsStoreError):
    """
    The backend reports no object under the derived key.

    Distinct from BackendReadError so callers can tell "never stored"
    apart from "storage system broken".
    """

    @classmethod
    def missing(
        cls,
        oid: str,
        key: str,
        cause: Optional[Exception] = None,
    ) -> NotFoundError:
        return cls(
            code=ErrorCode.OBJECT_NOT_FOUND,
            message=f"Object {oid} not found at '{key}'",
            cause=cause,
            context={"oid": oid, "key": key},
        )


# =============================================================================
# BACKEND ERRORS (TRANSPORT / SERVICE)
# =============================================================================
@dataclass
class BackendError(LfsStoreError):
    """
    Errors from the object storage service or its transport.

    Surfaced after the client's own retry budget is spent.
    """

    @classmethod
    def write_failed(
        cls,
        key: str,
        operation: str,
        cause: Optional[Exception] = None,
    ) -> BackendWriteError:
        """Backend rejected or failed a mutating call."""
        return BackendWriteError(
            code=ErrorCode.BACKEND_WRITE_FAILED,
            message=f"Backend {operation} failed for '{key}': {cause}",
            cause=cause,
            context={"key": key, "operation": operation},
        )

    @classmethod
    def read_failed(
        cls,
        key: str,
        cause: Optional[Exception] = None,
    ) -> BackendReadError:
        """Backend read failed for a reason other than absence."""
        return BackendReadError(
            code=ErrorCode.BACKEND_READ_FAILED,
            message=f"Backend read failed for '{key}': {cause}",
            cause=cause,
            context={"key": key},
        )

    @classmethod
    def unavailable(
        cls,
        key: str,
        expected_present: bool,
        attempts: int,
        waited_ms: float,
        last_error: Optional[str] = None,
    ) -> BackendUnavailableError:
        """Object visibility was not confirmed within the wait bound."""
        state = "present" if expected_present else "absent"
        return BackendUnavailableError(
            code=ErrorCode.BACKEND_UNAVAILABLE,
            message=(
                f"Backend did not report '{key}' {state} after "
                f"{attempts} probes ({waited_ms:.0f}ms)"
            ),
            context={
                "key": key,
                "expected": state,
                "attempts": attempts,
                "waited_ms": round(waited_ms, 1),
                "last_error": last_error,
            },
        )


@dataclass
class BackendWriteError(BackendError):
    """A put or delete call failed."""


@dataclass
class BackendReadError(BackendError):
    """A get call, or draining its body, failed."""


@dataclass
class BackendUnavailableError(BackendError):
    """The existence probe never confirmed the expected state."""


# =============================================================================
# SOURCE ERRORS (CALLER I/O)
# =============================================================================
@dataclass
class ContentSourceError(LfsStoreError):
    """
    The caller's byte source raised while being drained.

    An I/O fault on the caller's side, not a verdict on the content:
    nothing was hashed or uploaded. Retrying with a fresh source may succeed.
    """

    @classmethod
    def unreadable(
        cls,
        oid: str,
        cause: Optional[Exception] = None,
    ) -> ContentSourceError:
        return cls(
            code=ErrorCode.SOURCE_READ_FAILED,
            message=f"Failed reading content for {oid}: {cause}",
            cause=cause,
            context={"oid": oid},
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass
class ConfigError(LfsStoreError):
    """
    A store could not be constructed.

    Fatal: no partially-initialized store is ever returned.
    """

    @classmethod
    def session_failed(
        cls,
        region: str,
        endpoint_url: Optional[str],
        cause: Optional[Exception] = None,
    ) -> ConfigError:
        """Backend session or client could not be created."""
        return cls(
            code=ErrorCode.CONFIG_SESSION_FAILED,
            message=f"Failed to create S3 client for region {region}: {cause}",
            cause=cause,
            context={"region": region, "endpoint_url": endpoint_url},
        )

    @classmethod
    def bucket_unreachable(
        cls,
        bucket: str,
        cause: Optional[Exception] = None,
    ) -> ConfigError:
        """Configured bucket did not answer a head_bucket probe."""
        return cls(
            code=ErrorCode.CONFIG_BUCKET_UNREACHABLE,
            message=f"Bucket '{bucket}' is not reachable: {cause}",
            cause=cause,
            context={"bucket": bucket},
        )
