"""
LFS Content Store

Content-addressable blob storage for Git LFS servers on AWS S3 and
S3-compatible services:
- Objects are keyed by the SHA-256 of their contents
- Every write is verified against the declared oid and size before upload
- Writes return only once the object is visible to readers
- Typed Result errors for integrity, lookup, backend and config failures

Author: LFS Storage Engineering
License: MIT
"""

__version__ = "1.0.0"
__author__ = "LFS Storage Engineering"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
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
from lfsstore.storage import (
    AccessPolicy,
    ContentStore,
    InMemoryObjectBackend,
    S3ContentStore,
    S3StoreConfig,
    open_store,
    transform_key,
)

__all__ = [
    # Version
    "__version__",
    "__author__",
    # Result monad
    "Result",
    "Ok",
    "Err",
    # Identity types
    "ContentHash",
    "MetaObject",
    # Errors
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
    # Storage
    "AccessPolicy",
    "ContentStore",
    "InMemoryObjectBackend",
    "S3ContentStore",
    "S3StoreConfig",
    "open_store",
    "transform_key",
]
