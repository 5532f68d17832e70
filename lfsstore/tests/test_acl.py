"""
Unit Tests: Access Policy Resolution
"""

import pytest

from lfsstore.storage.acl import AccessPolicy


class TestResolve:

    @pytest.mark.parametrize(
        "name, policy",
        [
            ("private", AccessPolicy.PRIVATE),
            ("public-read", AccessPolicy.PUBLIC_READ),
            ("public-read-write", AccessPolicy.PUBLIC_READ_WRITE),
            ("authenticated-read", AccessPolicy.AUTHENTICATED_READ),
            ("bucket-owner-full-control", AccessPolicy.BUCKET_OWNER_FULL_CONTROL),
        ],
    )
    def test_known_names(self, name, policy):
        assert AccessPolicy.resolve(name) is policy

    @pytest.mark.parametrize("name", ["", None, "public", "PUBLIC-READ", " private", "log-delivery-write"])
    def test_unknown_names_are_private(self, name):
        assert AccessPolicy.resolve(name) is AccessPolicy.PRIVATE

    def test_wire_tokens(self):
        assert str(AccessPolicy.PUBLIC_READ) == "public-read"
        assert AccessPolicy.BUCKET_OWNER_FULL_CONTROL.value == "bucket-owner-full-control"


class TestIsPublic:

    def test_public_policies(self):
        assert AccessPolicy.PUBLIC_READ.is_public
        assert AccessPolicy.PUBLIC_READ_WRITE.is_public

    def test_restricted_policies(self):
        assert not AccessPolicy.PRIVATE.is_public
        assert not AccessPolicy.AUTHENTICATED_READ.is_public
        assert not AccessPolicy.BUCKET_OWNER_FULL_CONTROL.is_public
