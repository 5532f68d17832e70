"""
S3 Content-Addressable Store
============================

Durable, verified blob storage for Git LFS objects on AWS S3 and
S3-compatible services (MinIO, Ceph RGW, R2).

Design Principles:
------------------
1. **Verify, then write**: content is buffered, its length and SHA-256
   checked against the caller's metadata, and only then uploaded
2. **Read-your-writes**: put returns only once the backend reports the
   object through its existence probe
3. **Result Monad**: expected failures are returned, not raised
4. **Stateless instance**: client, config, policy and key deriver are all
   read-only after construction

Algorithmic Complexity:
-----------------------
| Operation | Time  | Space | Notes                          |
|-----------|-------|-------|--------------------------------|
| put       | O(n)  | O(n)  | buffer + hash, then one upload |
| get       | O(n)  | O(n)  | full download to memory        |
| exists    | O(1)  | O(1)  | head_object only               |
| delete    | O(1)  | O(1)  | delete_object + absence wait   |

Thread Safety:
--------------
- boto3 clients are safe for concurrent use across threads
- No shared mutable state in the instance
- Concurrent puts of the same oid both reach the backend; content
  addressing makes the outcome identical

Author: LFS Storage Engineering
License: MIT
"""

from __future__ import annotations

import io
import time
from typing import IO, Any, Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lfsstore.core import constants as C
from lfsstore.core.errors import (
    BackendError,
    ConfigError,
    ContentSourceError,
    IntegrityError,
    LfsStoreError,
    NotFoundError,
)
from lfsstore.core.types import ContentHash, Err, MetaObject, Ok, Result
from lfsstore.observability.logging import StructuredLogger
from lfsstore.reliability.retry import BackoffPolicy, poll_until
from lfsstore.storage.acl import AccessPolicy
from lfsstore.storage.config import S3StoreConfig
from lfsstore.storage.keys import KeyDeriver, key_deriver
from lfsstore.storage.protocols import ByteSource, ObjectBackend

logger = StructuredLogger(__name__)

# Failures the backend client can raise for a single call
BACKEND_ERRORS = (ClientError, BotoCoreError)


def is_not_found(error: Exception) -> bool:
    """
    True when error is the backend's signal for an absent object.

    GET answers NoSuchKey; HEAD has no body and answers a bare 404.
    A missing bucket is not an absent object.
    """
    if not isinstance(error, ClientError):
        return False
    code = str(error.response.get("Error", {}).get("Code", ""))
    return code in C.NOT_FOUND_CODES


def read_fully(content: ByteSource) -> bytes:
    """
    Drain a byte source into memory.

    Accepts bytes-like objects, readable binary streams and iterables
    of byte chunks. Never seeks.

    Raises:
        OSError: If the source fails while being read.
    """
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)

    buf = bytearray()
    if hasattr(content, "read"):
        while True:
            chunk = content.read(C.READ_CHUNK_BYTES)
            if not chunk:
                break
            buf += chunk
        return bytes(buf)

    chunks: Iterable[bytes] = content
    for chunk in chunks:
        buf += chunk
    return bytes(buf)


class S3ContentStore:
    """
    Content-addressed blob store on an S3 bucket.

    Objects live at transform_key(oid) and are written once with a fixed
    content type and the store's access policy. A successful put is
    proof that the bytes under that key have the declared length and
    hash.

    Example:
        >>> config = S3StoreConfig(bucket_name="lfs-objects", acl="private")
        >>> store = S3ContentStore.open(config).unwrap()
        >>> meta = MetaObject.for_content(b"test content")
        >>> store.put(meta, b"test content")
        Ok(None)
        >>> store.get(meta).unwrap().read()
        b'test content'
    """

    __slots__ = ("_config", "_client", "_acl", "_derive", "_wait")

    def __init__(
        self,
        config: S3StoreConfig,
        client: ObjectBackend,
        derive: Optional[KeyDeriver] = None,
        wait_policy: Optional[BackoffPolicy] = None,
    ) -> None:
        """
        Initialize store around an existing client.

        Prefer `open()`, which also builds the client.

        Args:
            config: Store configuration.
            client: boto3 S3 client or compatible backend.
            derive: Key deriver (default: transform_key with config.key_prefix).
            wait_policy: Existence wait bounds (default: from config).
        """
        self._config = config
        self._client = client
        self._acl = AccessPolicy.resolve(config.acl)
        self._derive = derive or key_deriver(config.key_prefix)
        self._wait = (wait_policy or config.wait_policy()).with_retryable(*BACKEND_ERRORS)

    # -------------------------------------------------------------------------
    # CONSTRUCTION
    # -------------------------------------------------------------------------

    @classmethod
    def open(
        cls,
        config: S3StoreConfig,
        client: Optional[ObjectBackend] = None,
        derive: Optional[KeyDeriver] = None,
    ) -> Result[S3ContentStore, ConfigError]:
        """
        Build a store, creating the boto3 session and client.

        Credentials go straight to the session; the process
        environment is left untouched.

        Args:
            config: Store configuration.
            client: Pre-built client; skips session creation.
            derive: Key deriver override.

        Returns:
            Ok(store) on success.
            Err(ConfigError) if no usable client could be created.
        """
        if client is None:
            try:
                session = boto3.session.Session(**config.session_kwargs())
                client = session.client("s3", **config.client_kwargs())
            except (BotoCoreError, ValueError) as e:
                logger.error(
                    "Failed to create S3 client",
                    fn="S3ContentStore.open",
                    region=config.region,
                    error=str(e),
                )
                return Err(ConfigError.session_failed(config.region, config.endpoint_url, cause=e))

        if config.check_bucket:
            try:
                client.head_bucket(Bucket=config.bucket_name)
            except BACKEND_ERRORS as e:
                logger.error(
                    "Bucket probe failed",
                    fn="S3ContentStore.open",
                    bucket=config.bucket_name,
                    error=str(e),
                )
                return Err(ConfigError.bucket_unreachable(config.bucket_name, cause=e))

        store = cls(config, client, derive=derive)
        logger.info(
            "Content store ready",
            bucket=config.bucket_name,
            acl=store.acl.value,
            endpoint=config.endpoint_url or "aws",
        )
        if store.acl.is_public:
            logger.warning(
                "Objects will be publicly readable",
                fn="S3ContentStore.open",
                bucket=config.bucket_name,
                acl=store.acl.value,
            )
        return Ok(store)

    def with_acl(self, name: Optional[str]) -> S3ContentStore:
        """
        Store sharing this client with the access policy re-resolved.

        Objects already written keep the policy they were written with.
        """
        store = S3ContentStore(self._config, self._client, self._derive, self._wait)
        store._acl = AccessPolicy.resolve(name)
        return store

    # -------------------------------------------------------------------------
    # PROPERTIES
    # -------------------------------------------------------------------------

    @property
    def acl(self) -> AccessPolicy:
        return self._acl

    @property
    def bucket(self) -> str:
        return self._config.bucket_name

    @property
    def client(self) -> ObjectBackend:
        return self._client

    def key_for(self, oid: str) -> str:
        """Backend key for oid."""
        return self._derive(oid)

    # -------------------------------------------------------------------------
    # CORE OPERATIONS
    # -------------------------------------------------------------------------

    def put(self, meta: MetaObject, content: ByteSource) -> Result[None, LfsStoreError]:
        """
        Verify content against meta, upload it and wait until visible.

        The whole source is buffered and checked before anything is sent,
        so the backend never receives bytes that fail verification.

        Args:
            meta: Declared oid and size.
            content: Bytes, binary stream or iterable of chunks.

        Returns:
            Ok(None) once the object is stored and visible.
            Err(SizeMismatchError) if the length differs from meta.size.
            Err(HashMismatchError) if the SHA-256 differs from meta.oid.
            Err(ContentSourceError) if the source could not be read.
            Err(BackendWriteError) if the upload failed.
            Err(BackendUnavailableError) if visibility was never confirmed.

        Complexity: O(n) time and memory, n = content size.
        """
        key = self.key_for(meta.oid)

        try:
            data = read_fully(content)
        except OSError as e:
            logger.error("Content source failed", fn="S3ContentStore.put", oid=meta.oid, error=str(e))
            return Err(ContentSourceError.unreadable(meta.oid, cause=e))

        if len(data) != meta.size:
            logger.warning(
                "Rejected put: size mismatch",
                fn="S3ContentStore.put",
                oid=meta.oid,
                declared_size=meta.size,
                actual_size=len(data),
            )
            return Err(IntegrityError.size_mismatch(meta.oid, meta.size, len(data)))

        actual_oid = ContentHash.compute(data).to_hex()
        if actual_oid != meta.oid:
            logger.warning(
                "Rejected put: hash mismatch",
                fn="S3ContentStore.put",
                oid=meta.oid,
                actual_oid=actual_oid,
            )
            return Err(IntegrityError.hash_mismatch(meta.oid, actual_oid))

        start_ns = time.perf_counter_ns()
        try:
            response = self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentLength=meta.size,
                ContentType=C.CONTENT_TYPE,
                ACL=self._acl.value,
            )
        except BACKEND_ERRORS as e:
            logger.error("Backend write failed", fn="S3ContentStore.put", oid=meta.oid, key=key, error=str(e))
            return Err(BackendError.write_failed(key, "put_object", cause=e))

        # Block until the object has been written out
        stats = poll_until(lambda: self._probe(key), self._wait)
        if not stats.satisfied:
            logger.error(
                "Object not visible after write",
                fn="S3ContentStore.put",
                oid=meta.oid,
                key=key,
                attempts=stats.attempts,
                last_error=stats.last_error,
            )
            return Err(BackendError.unavailable(
                key,
                expected_present=True,
                attempts=stats.attempts,
                waited_ms=stats.total_delay_ms,
                last_error=stats.last_error,
            ))

        logger.info(
            "Stored object",
            fn="S3ContentStore.put",
            oid=meta.oid,
            key=key,
            size=meta.size,
            etag=str(response.get("ETag", "")).strip('"'),
            probes=stats.attempts,
            latency_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 1),
        )
        return Ok(None)

    def get(self, meta: MetaObject) -> Result[IO[bytes], LfsStoreError]:
        """
        Download an object fully into memory.

        The backend response is drained and closed before returning, so no
        connection outlives the call. The bytes are not re-hashed.

        Returns:
            Ok(BytesIO) positioned at the start of the content.
            Err(NotFoundError) if nothing is stored under the oid.
            Err(BackendReadError) for any other failure.
        """
        key = self.key_for(meta.oid)

        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except BACKEND_ERRORS as e:
            if is_not_found(e):
                logger.info("Object not found", fn="S3ContentStore.get", oid=meta.oid, key=key)
                return Err(NotFoundError.missing(meta.oid, key, cause=e))
            logger.error("Backend read failed", fn="S3ContentStore.get", oid=meta.oid, key=key, error=str(e))
            return Err(BackendError.read_failed(key, cause=e))

        body = response["Body"]
        try:
            # Buffer here so the body can be closed before returning
            data = body.read()
        except (BotoCoreError, OSError) as e:
            logger.error("Reading object body failed", fn="S3ContentStore.get", oid=meta.oid, key=key, error=str(e))
            return Err(BackendError.read_failed(key, cause=e))
        finally:
            body.close()

        return Ok(io.BytesIO(data))

    def exists(self, meta: MetaObject) -> bool:
        """
        Check presence with a head_object probe.

        Any failure other than not-found also yields False; a transient
        backend error is indistinguishable from absence here.
        """
        key = self.key_for(meta.oid)
        try:
            return self._probe(key)
        except BACKEND_ERRORS as e:
            logger.warning("Existence probe failed", fn="S3ContentStore.exists", oid=meta.oid, key=key, error=str(e))
            return False

    def delete(self, meta: MetaObject) -> Result[None, LfsStoreError]:
        """
        Remove an object and wait until the backend reports it absent.

        Deleting an absent oid succeeds.

        Returns:
            Ok(None) once the object is gone.
            Err(BackendWriteError) if the delete call failed.
            Err(BackendUnavailableError) if absence was never confirmed.
        """
        key = self.key_for(meta.oid)

        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except BACKEND_ERRORS as e:
            logger.error("Backend delete failed", fn="S3ContentStore.delete", oid=meta.oid, key=key, error=str(e))
            return Err(BackendError.write_failed(key, "delete_object", cause=e))

        stats = poll_until(lambda: not self._probe(key), self._wait)
        if not stats.satisfied:
            return Err(BackendError.unavailable(
                key,
                expected_present=False,
                attempts=stats.attempts,
                waited_ms=stats.total_delay_ms,
                last_error=stats.last_error,
            ))

        logger.info("Deleted object", fn="S3ContentStore.delete", oid=meta.oid, key=key)
        return Ok(None)

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    def _probe(self, key: str) -> bool:
        """
        Existence probe.

        Returns True if present, False on a not-found answer. Any other
        backend failure is raised.
        """
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if is_not_found(e):
                return False
            raise

    def __repr__(self) -> str:
        return f"S3ContentStore(bucket={self.bucket!r}, acl={self._acl.value!r})"


def open_store(config: Optional[S3StoreConfig] = None, **overrides: Any) -> Result[S3ContentStore, ConfigError]:
    """
    Open a store from config, or from the environment when config is None.

    Keyword overrides are forwarded to S3ContentStore.open (client, derive).

    Raises:
        ValueError: If config is None and the environment is incomplete.
    """
    if config is None:
        config = S3StoreConfig.from_env()
    return S3ContentStore.open(config, **overrides)
