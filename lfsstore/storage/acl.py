"""
Access Policy Resolution

Maps a configured policy name onto an S3 canned ACL. The mapping is
closed: any name outside it resolves to PRIVATE, never to an error.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class AccessPolicy(Enum):
    """
    Canned ACL applied to every object a store writes.

    Values are the S3 wire tokens.
    """
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"

    @classmethod
    def resolve(cls, name: Optional[str]) -> AccessPolicy:
        """
        Resolve a configured policy name.

        Matching is exact. Unknown, empty or missing names fall back
        to PRIVATE.

        Complexity: O(1)
        """
        try:
            return cls(name)
        except ValueError:
            logger.debug(f"Unrecognized access policy {name!r}, using private")
            return cls.PRIVATE

    @property
    def is_public(self) -> bool:
        """True when anonymous clients may read written objects."""
        return self in (AccessPolicy.PUBLIC_READ, AccessPolicy.PUBLIC_READ_WRITE)

    def __str__(self) -> str:
        return self.value
