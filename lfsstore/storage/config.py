"""
S3 Content Store Configuration
==============================

Type-safe, immutable configuration for the S3-backed content store.

Design Principles:
------------------
1. **Immutability**: Frozen dataclass, safe to share between threads
2. **Validation**: Pre-conditions checked at construction time
3. **Explicit credentials**: Handed to the boto3 session, never exported
   to the process environment
4. **Environment**: Optional loading from environment variables

Author: LFS Storage Engineering
License: MIT
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from botocore.config import Config as BotoConfig

from lfsstore.core import constants as C
from lfsstore.reliability.retry import BackoffPolicy

_ADDRESSING_STYLES = ("auto", "path", "virtual")

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


class _EnvReader:
    """Typed, read-only lookups of {prefix}_{NAME} variables."""

    __slots__ = ("prefix",)

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def text(self, name: str, default: str = "", fallback: Optional[str] = None) -> str:
        value = os.environ.get(f"{self.prefix}_{name}")
        if not value and fallback:
            value = os.environ.get(fallback)
        return value or default

    def integer(self, name: str, default: int) -> int:
        raw = self.text(name).strip()
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{self.prefix}_{name} must be an integer, got {raw!r}") from None

    def flag(self, name: str, default: bool) -> bool:
        word = self.text(name).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        return default


@dataclass(frozen=True, slots=True)
class S3StoreConfig:
    """
    S3-compatible content store configuration.

    Supports AWS S3, MinIO, Ceph RGW and other S3-compatible stores.

    Thread Safety:
    -------------
    Frozen dataclass - immutable after construction.

    Attributes:
        bucket_name: Bucket holding the objects (required).
        region: AWS region.
        endpoint_url: Custom endpoint for S3-compatible services (None for AWS).
        access_key_id: AWS access key (None for IAM role / default chain).
        secret_access_key: AWS secret key (None for IAM role / default chain).
        session_token: Temporary session token for STS.
        acl: Access policy name, resolved by AccessPolicy.resolve.
        key_prefix: Prefix prepended to every derived key.
        max_retries: Transport-level retry budget handed to botocore.
        connect_timeout_seconds: TCP connect timeout.
        read_timeout_seconds: Read operation timeout.
        addressing_style: "auto", "path" or "virtual" bucket addressing.
        use_ssl: Use HTTPS for connections.
        verify_ssl: Verify SSL certificates (disable for self-signed).
        check_bucket: Probe the bucket with head_bucket when opening a store.
        wait_base_delay_ms: First delay of the existence wait.
        wait_max_delay_ms: Delay cap of the existence wait.
        wait_max_attempts: Probe budget of the existence wait.
        wait_timeout_seconds: Deadline of the existence wait.
    """
    bucket_name: str
    region: str = C.DEFAULT_REGION
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    acl: str = "private"
    key_prefix: str = ""

    max_retries: int = C.TRANSPORT_MAX_RETRIES
    connect_timeout_seconds: int = C.CONNECT_TIMEOUT_S
    read_timeout_seconds: int = C.READ_TIMEOUT_S
    addressing_style: str = "auto"

    use_ssl: bool = True
    verify_ssl: bool = True
    check_bucket: bool = False

    wait_base_delay_ms: int = C.WAIT_BASE_DELAY_MS
    wait_max_delay_ms: int = C.WAIT_MAX_DELAY_MS
    wait_max_attempts: int = C.WAIT_MAX_ATTEMPTS
    wait_timeout_seconds: int = C.WAIT_TIMEOUT_S

    def __post_init__(self) -> None:
        """
        Validate configuration invariants.

        Pre-conditions (enforced):
        - bucket_name has at least 3 characters
        - endpoint_url, when set, is an http(s) URL
        - credentials are given as a pair or not at all
        - retry and wait budgets are non-negative / positive
        - timeouts > 0

        Raises:
            ValueError: If any invariant is violated.
        """
        if not self.bucket_name or len(self.bucket_name) < 3:
            raise ValueError("bucket_name must be at least 3 characters")

        if self.endpoint_url and not self.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(f"endpoint_url must be an http(s) URL, got {self.endpoint_url!r}")

        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ValueError("access_key_id and secret_access_key must be set together")

        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")

        if self.connect_timeout_seconds <= 0:
            raise ValueError("connect_timeout_seconds must be > 0")
        if self.read_timeout_seconds <= 0:
            raise ValueError("read_timeout_seconds must be > 0")

        if self.addressing_style not in _ADDRESSING_STYLES:
            raise ValueError(
                f"addressing_style must be one of {_ADDRESSING_STYLES}, "
                f"got {self.addressing_style!r}"
            )

        if self.wait_max_attempts < 1:
            raise ValueError(f"wait_max_attempts must be >= 1, got {self.wait_max_attempts}")
        if self.wait_base_delay_ms < 0 or self.wait_max_delay_ms < 0:
            raise ValueError("wait delays must be >= 0")
        if self.wait_timeout_seconds <= 0:
            raise ValueError("wait_timeout_seconds must be > 0")

    @classmethod
    def from_env(cls, prefix: str = "LFS_S3") -> "S3StoreConfig":
        """
        Construct configuration from environment variables.

        Environment Variables:
        - {prefix}_BUCKET: Bucket name (required)
        - {prefix}_REGION: AWS region (default: us-east-1)
        - {prefix}_ENDPOINT_URL: Custom endpoint URL
        - {prefix}_ACCESS_KEY_ID / AWS_ACCESS_KEY_ID: Access key
        - {prefix}_SECRET_ACCESS_KEY / AWS_SECRET_ACCESS_KEY: Secret key
        - {prefix}_SESSION_TOKEN / AWS_SESSION_TOKEN: STS session token
        - {prefix}_ACL: Access policy name (default: private)
        - {prefix}_KEY_PREFIX: Key prefix
        - {prefix}_MAX_RETRIES: Transport retries (default: 5)
        - {prefix}_ADDRESSING_STYLE: auto|path|virtual
        - {prefix}_USE_SSL / {prefix}_VERIFY_SSL: TLS flags
        - {prefix}_CHECK_BUCKET: Probe bucket on open
        - {prefix}_WAIT_*: Existence wait bounds

        The environment is only read, never written.

        Raises:
            ValueError: If the bucket is missing or a value is invalid.
        """
        env = _EnvReader(prefix)

        bucket = env.text("BUCKET")
        if not bucket:
            raise ValueError(f"Environment variable {prefix}_BUCKET is required")

        return cls(
            bucket_name=bucket,
            region=env.text("REGION", C.DEFAULT_REGION),
            endpoint_url=env.text("ENDPOINT_URL") or None,
            access_key_id=env.text("ACCESS_KEY_ID", fallback="AWS_ACCESS_KEY_ID") or None,
            secret_access_key=env.text("SECRET_ACCESS_KEY", fallback="AWS_SECRET_ACCESS_KEY") or None,
            session_token=env.text("SESSION_TOKEN", fallback="AWS_SESSION_TOKEN") or None,
            acl=env.text("ACL", "private"),
            key_prefix=env.text("KEY_PREFIX"),
            max_retries=env.integer("MAX_RETRIES", C.TRANSPORT_MAX_RETRIES),
            connect_timeout_seconds=env.integer("CONNECT_TIMEOUT", C.CONNECT_TIMEOUT_S),
            read_timeout_seconds=env.integer("READ_TIMEOUT", C.READ_TIMEOUT_S),
            addressing_style=env.text("ADDRESSING_STYLE", "auto"),
            use_ssl=env.flag("USE_SSL", True),
            verify_ssl=env.flag("VERIFY_SSL", True),
            check_bucket=env.flag("CHECK_BUCKET", False),
            wait_base_delay_ms=env.integer("WAIT_BASE_DELAY_MS", C.WAIT_BASE_DELAY_MS),
            wait_max_delay_ms=env.integer("WAIT_MAX_DELAY_MS", C.WAIT_MAX_DELAY_MS),
            wait_max_attempts=env.integer("WAIT_MAX_ATTEMPTS", C.WAIT_MAX_ATTEMPTS),
            wait_timeout_seconds=env.integer("WAIT_TIMEOUT", C.WAIT_TIMEOUT_S),
        )

    def session_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for boto3.session.Session.

        Credentials are omitted when unset so the default provider
        chain (instance role, shared config) applies.
        """
        kwargs: Dict[str, Any] = {"region_name": self.region}

        if self.access_key_id and self.secret_access_key:
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key

        if self.session_token:
            kwargs["aws_session_token"] = self.session_token

        return kwargs

    def client_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for session.client("s3", ...).

        Carries the transport retry budget and timeouts in a botocore
        Config.
        """
        kwargs: Dict[str, Any] = {
            "region_name": self.region,
            "use_ssl": self.use_ssl,
            "config": BotoConfig(
                connect_timeout=self.connect_timeout_seconds,
                read_timeout=self.read_timeout_seconds,
                retries={"max_attempts": self.max_retries, "mode": "standard"},
                s3={"addressing_style": self.addressing_style},
            ),
        }

        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        if not self.verify_ssl:
            kwargs["verify"] = False

        return kwargs

    def wait_policy(self) -> BackoffPolicy:
        """Bounded backoff used to confirm visibility after writes."""
        return BackoffPolicy(
            max_attempts=self.wait_max_attempts,
            base_delay_ms=self.wait_base_delay_ms,
            max_delay_ms=self.wait_max_delay_ms,
            timeout_s=float(self.wait_timeout_seconds),
        )
