"""
Storage Module: Content-Addressed Blob Storage on S3
====================================================

Provides:
- S3ContentStore: verified put, buffered get, existence probe
- Access policy resolution onto S3 canned ACLs
- Key derivation from oids
- Configuration for AWS S3 and S3-compatible services
- In-memory backend for development/testing

Example:
    >>> from lfsstore.storage import S3ContentStore, S3StoreConfig
    >>> store = S3ContentStore.open(S3StoreConfig(bucket_name="lfs")).unwrap()
"""

from lfsstore.storage.acl import AccessPolicy
from lfsstore.storage.backends import InMemoryObjectBackend, StoredObject
from lfsstore.storage.config import S3StoreConfig
from lfsstore.storage.keys import KeyDeriver, key_deriver, transform_key
from lfsstore.storage.protocols import ByteSource, ContentStore, ObjectBackend
from lfsstore.storage.s3_store import S3ContentStore, is_not_found, open_store, read_fully

__all__ = [
    "AccessPolicy",
    "InMemoryObjectBackend",
    "StoredObject",
    "S3StoreConfig",
    "KeyDeriver",
    "key_deriver",
    "transform_key",
    "ByteSource",
    "ContentStore",
    "ObjectBackend",
    "S3ContentStore",
    "is_not_found",
    "open_store",
    "read_fully",
]
