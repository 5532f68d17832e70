"""
Key Derivation

Maps an oid to its storage key. Objects are sharded two levels deep:

    6ae8a755...ff72  ->  6a/e8/a755...ff72

so that no single prefix accumulates every object in the bucket.
"""

from __future__ import annotations

from functools import partial
from typing import Callable

from lfsstore.core.constants import MIN_SHARDED_OID_LENGTH

KeyDeriver = Callable[[str], str]


def transform_key(oid: str, prefix: str = "") -> str:
    """
    Derive the storage key for an oid.

    Oids shorter than five characters are used verbatim.

    Args:
        oid: Content address (lowercase hex)
        prefix: Optional key prefix, joined with a single "/"

    Returns:
        Backend object key
    """
    if len(oid) < MIN_SHARDED_OID_LENGTH:
        key = oid
    else:
        key = f"{oid[0:2]}/{oid[2:4]}/{oid[4:]}"

    prefix = prefix.strip("/")
    if prefix:
        return f"{prefix}/{key}"
    return key


def key_deriver(prefix: str = "") -> KeyDeriver:
    """Bind a prefix, returning a one-argument deriver."""
    if not prefix.strip("/"):
        return transform_key
    return partial(transform_key, prefix=prefix)
