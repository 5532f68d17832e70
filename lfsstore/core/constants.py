"""
System-Wide Constants for the LFS Content Store

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# SIZE AND TIME UNITS
# =============================================================================
KB: Final[int] = 1024
MB: Final[int] = 1024 * KB

SECOND_MS: Final[int] = 1000

# =============================================================================
# CONTENT
# =============================================================================
# Content type attached to every stored object
CONTENT_TYPE: Final[str] = "binary/octet-stream"

# Chunk size used when draining a caller-supplied byte source
READ_CHUNK_BYTES: Final[int] = 1 * MB

# Hex length of a SHA-256 oid
OID_HEX_LENGTH: Final[int] = 64

# Oids shorter than this are used verbatim as keys
MIN_SHARDED_OID_LENGTH: Final[int] = 5

# =============================================================================
# S3 TRANSPORT
# =============================================================================
DEFAULT_REGION: Final[str] = "us-east-1"
TRANSPORT_MAX_RETRIES: Final[int] = 5
CONNECT_TIMEOUT_S: Final[int] = 5
READ_TIMEOUT_S: Final[int] = 60

# Error codes S3 and compatible services use for an absent object
NOT_FOUND_CODES: Final[frozenset[str]] = frozenset({"404", "NoSuchKey", "NotFound"})

# =============================================================================
# EXISTENCE WAIT
# =============================================================================
WAIT_BASE_DELAY_MS: Final[int] = 100
WAIT_MAX_DELAY_MS: Final[int] = 5 * SECOND_MS
WAIT_MAX_ATTEMPTS: Final[int] = 20
WAIT_TIMEOUT_S: Final[int] = 100
