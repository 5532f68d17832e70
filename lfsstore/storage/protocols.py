"""
Storage Protocol Definitions
============================

Structural interfaces for the two seams of the content store:

- ObjectBackend: the subset of the boto3 S3 client the store calls.
  Failures surface as botocore.exceptions.ClientError (service
  responses, including 404) or BotoCoreError (transport).
- ContentStore: what the LFS metadata layer consumes.

Both are runtime-checkable so factories can validate injected objects.
"""

from __future__ import annotations

from typing import IO, Any, Dict, Iterable, Protocol, Union, runtime_checkable

from lfsstore.core.errors import LfsStoreError
from lfsstore.core.types import MetaObject, Result

# Anything put() knows how to drain into memory
ByteSource = Union[bytes, bytearray, memoryview, IO[bytes], Iterable[bytes]]


@runtime_checkable
class ObjectBackend(Protocol):
    """
    Object storage operations consumed by the store.

    Keyword arguments follow boto3's S3 client (Bucket, Key, Body, ...).
    Responses are boto3-shaped dictionaries.
    """

    def get_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Fetch an object; response["Body"] is a readable stream."""
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Store an object."""
        ...

    def head_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Existence probe; raises ClientError with code 404 when absent."""
        ...

    def delete_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Remove an object. Deleting an absent key succeeds."""
        ...

    def head_bucket(self, **kwargs: Any) -> Dict[str, Any]:
        """Bucket reachability probe."""
        ...


@runtime_checkable
class ContentStore(Protocol):
    """Content-addressed put/get/exists."""

    def put(self, meta: MetaObject, content: ByteSource) -> Result[None, LfsStoreError]:
        ...

    def get(self, meta: MetaObject) -> Result[IO[bytes], LfsStoreError]:
        ...

    def exists(self, meta: MetaObject) -> bool:
        ...
