"""
In-Memory Object Backend
========================

Process-local stand-in for the boto3 S3 client. Speaks the same keyword
arguments, returns boto3-shaped responses and fails with real botocore
ClientError values, so the content store runs unchanged against it.

Used for development and tests. Optionally simulates an eventually
consistent service: after a write or delete, the next `visibility_lag`
head_object probes of that key still report the previous state.
"""

from __future__ import annotations

import hashlib
import io
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from botocore.exceptions import ClientError
from botocore.response import StreamingBody


@dataclass(frozen=True)
class StoredObject:
    """Bytes and write-time metadata held under one key."""
    data: bytes
    content_type: str
    acl: Optional[str]
    etag: str
    last_modified: datetime

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def _client_error(code: str, status: int, message: str, operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class InMemoryObjectBackend:
    """
    In-memory S3 client subset.

    Thread-safe: every operation holds a single lock.

    Example:
        backend = InMemoryObjectBackend(buckets=["lfs-objects"])
        backend.put_object(Bucket="lfs-objects", Key="a/b/c", Body=b"data")
        body = backend.get_object(Bucket="lfs-objects", Key="a/b/c")["Body"].read()
    """

    __slots__ = ("_buckets", "_objects", "_lagging", "_visibility_lag", "_lock")

    def __init__(self, buckets: Iterable[str] = (), visibility_lag: int = 0) -> None:
        self._buckets = set(buckets)
        self._objects: Dict[Tuple[str, str], StoredObject] = {}
        # key -> (probes left, state those probes report)
        self._lagging: Dict[Tuple[str, str], Tuple[int, Optional[StoredObject]]] = {}
        self._visibility_lag = visibility_lag
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # BUCKETS
    # -------------------------------------------------------------------------

    def create_bucket(self, Bucket: str, **_: Any) -> Dict[str, Any]:
        with self._lock:
            self._buckets.add(Bucket)
        return {"Location": f"/{Bucket}"}

    def head_bucket(self, Bucket: str, **_: Any) -> Dict[str, Any]:
        with self._lock:
            self._require_bucket(Bucket, "HeadBucket")
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}

    # -------------------------------------------------------------------------
    # OBJECTS
    # -------------------------------------------------------------------------

    def put_object(
        self,
        Bucket: str,
        Key: str,
        Body: Any = b"",
        ContentLength: Optional[int] = None,
        ContentType: str = "binary/octet-stream",
        ACL: Optional[str] = None,
        **_: Any,
    ) -> Dict[str, Any]:
        data = Body.read() if hasattr(Body, "read") else bytes(Body)
        if ContentLength is not None and ContentLength != len(data):
            raise _client_error(
                "IncompleteBody", 400,
                f"Declared {ContentLength} bytes, received {len(data)}",
                "PutObject",
            )

        etag = hashlib.md5(data).hexdigest()
        obj = StoredObject(
            data=data,
            content_type=ContentType,
            acl=ACL,
            etag=etag,
            last_modified=datetime.now(timezone.utc),
        )

        with self._lock:
            self._require_bucket(Bucket, "PutObject")
            previous = self._objects.get((Bucket, Key))
            self._objects[(Bucket, Key)] = obj
            self._start_lag((Bucket, Key), previous)

        return {"ETag": f'"{etag}"'}

    def get_object(self, Bucket: str, Key: str, **_: Any) -> Dict[str, Any]:
        with self._lock:
            self._require_bucket(Bucket, "GetObject")
            obj = self._objects.get((Bucket, Key))

        if obj is None:
            raise _client_error("NoSuchKey", 404, "The specified key does not exist.", "GetObject")

        response = self._describe(obj)
        response["Body"] = StreamingBody(io.BytesIO(obj.data), len(obj.data))
        return response

    def head_object(self, Bucket: str, Key: str, **_: Any) -> Dict[str, Any]:
        with self._lock:
            self._require_bucket(Bucket, "HeadObject")
            obj = self._visible((Bucket, Key))

        if obj is None:
            # HEAD responses carry no body, so S3 reports the bare status
            raise _client_error("404", 404, "Not Found", "HeadObject")

        return self._describe(obj)

    def delete_object(self, Bucket: str, Key: str, **_: Any) -> Dict[str, Any]:
        with self._lock:
            self._require_bucket(Bucket, "DeleteObject")
            previous = self._objects.pop((Bucket, Key), None)
            if previous is not None:
                self._start_lag((Bucket, Key), previous)

        return {"ResponseMetadata": {"HTTPStatusCode": 204}}

    # -------------------------------------------------------------------------
    # INSPECTION
    # -------------------------------------------------------------------------

    def stored_object(self, bucket: str, key: str) -> Optional[StoredObject]:
        """Current object under key, ignoring visibility lag."""
        with self._lock:
            return self._objects.get((bucket, key))

    def keys(self, bucket: str) -> list[str]:
        with self._lock:
            return sorted(k for b, k in self._objects if b == bucket)

    # -------------------------------------------------------------------------
    # INTERNALS (caller holds the lock)
    # -------------------------------------------------------------------------

    def _require_bucket(self, bucket: str, operation: str) -> None:
        if bucket not in self._buckets:
            raise _client_error("NoSuchBucket", 404, "The specified bucket does not exist", operation)

    def _start_lag(self, slot: Tuple[str, str], previous: Optional[StoredObject]) -> None:
        if self._visibility_lag > 0:
            self._lagging[slot] = (self._visibility_lag, previous)

    def _visible(self, slot: Tuple[str, str]) -> Optional[StoredObject]:
        lag = self._lagging.get(slot)
        if lag is None:
            return self._objects.get(slot)

        remaining, stale = lag
        if remaining <= 1:
            del self._lagging[slot]
        else:
            self._lagging[slot] = (remaining - 1, stale)
        return stale

    @staticmethod
    def _describe(obj: StoredObject) -> Dict[str, Any]:
        return {
            "ContentLength": obj.size_bytes,
            "ContentType": obj.content_type,
            "ETag": f'"{obj.etag}"',
            "LastModified": obj.last_modified,
            "Metadata": {},
        }
