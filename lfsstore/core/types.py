"""
Core Types for the LFS Content Store

- Ok / Err: Result variants returned by every fallible store call
- ContentHash: SHA-256 digest, the content address of an object
- MetaObject: caller-declared oid and size of an object

Store operations never raise for expected failures (bad content, missing
objects, backend outages). They return Err carrying an LfsStoreError and
callers branch with is_ok()/is_err() or structural pattern matching.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Generic, Literal, TypeVar, Union

from lfsstore.core.constants import OID_HEX_LENGTH

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


# =============================================================================
# RESULT
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome holding `value`."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[Any], F]) -> Ok[T]:
        return self

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain another fallible step on the value."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome holding `error`."""

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Raises:
            RuntimeError: Always. Check is_ok() first or use unwrap_or().
        """
        raise RuntimeError(f"unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        return self

    def map_err(self, fn: Callable[[E], F]) -> Err[F]:
        return Err(fn(self.error))

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


# =============================================================================
# CONTENT IDENTITY
# =============================================================================
@dataclass(frozen=True, slots=True)
class ContentHash:
    """
    SHA-256 digest of an object's bytes.

    The lowercase hex form is the oid Git LFS uses to name the object.
    """

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != hashlib.sha256().digest_size:
            raise ValueError(f"SHA-256 digest must be 32 bytes, got {len(self.digest)}")

    @classmethod
    def compute(cls, data: bytes) -> ContentHash:
        """Hash data in one pass. O(n)."""
        return cls(digest=hashlib.sha256(data).digest())

    @classmethod
    def from_hex(cls, oid: str) -> Result[ContentHash, str]:
        """Parse an oid; Err describes why it is not a SHA-256 hex string."""
        if len(oid) != OID_HEX_LENGTH:
            return Err(f"oid must be {OID_HEX_LENGTH} hex characters, got {len(oid)}")
        try:
            return Ok(cls(digest=bytes.fromhex(oid)))
        except ValueError as e:
            return Err(f"oid is not hexadecimal: {e}")

    def to_hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True, slots=True)
class MetaObject:
    """
    Caller-supplied description of an object.

    Attributes:
        oid: Lowercase hex SHA-256 of the content (the content address).
        size: Declared content length in bytes.

    Example:
        >>> MetaObject.for_content(b"test content")
        MetaObject(oid='6ae8a75555209fd6c44157c0aed8016e763ff435a19cf186f76863140143ff72', size=12)
    """

    oid: str
    size: int

    @classmethod
    def for_content(cls, data: bytes) -> MetaObject:
        """Describe data by its own hash and length."""
        return cls(oid=ContentHash.compute(data).to_hex(), size=len(data))

    def __str__(self) -> str:
        return f"{self.oid[:12]}({self.size}B)"
