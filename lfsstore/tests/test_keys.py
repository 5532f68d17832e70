"""
Unit Tests: Key Derivation

Tests:
    - Two-level sharding of full oids
    - Short oids used verbatim
    - Prefix joining
"""

import hashlib

import pytest

from lfsstore.storage.keys import key_deriver, transform_key

OID = "6ae8a75555209fd6c44157c0aed8016e763ff435a19cf186f76863140143ff72"


class TestTransformKey:

    def test_full_oid(self):
        assert transform_key(OID) == "6a/e8/a75555209fd6c44157c0aed8016e763ff435a19cf186f76863140143ff72"

    @pytest.mark.parametrize("oid", ["", "a", "ab", "abc", "abcd"])
    def test_short_oid_verbatim(self, oid):
        assert transform_key(oid) == oid

    def test_five_characters_sharded(self):
        assert transform_key("abcde") == "ab/cd/e"

    def test_key_keeps_every_character(self):
        """Removing the separators gives back the oid."""
        assert transform_key(OID).replace("/", "") == OID

    def test_distinct_oids_distinct_keys(self):
        oids = [hashlib.sha256(str(i).encode()).hexdigest() for i in range(500)]
        keys = {transform_key(oid) for oid in oids}
        assert len(keys) == len(oids)

    @pytest.mark.parametrize("prefix", ["lfs", "lfs/", "/lfs", "/lfs/"])
    def test_prefix_single_separator(self, prefix):
        assert transform_key("abcdef", prefix) == "lfs/ab/cd/ef"

    def test_nested_prefix(self):
        assert transform_key("abcdef", "repos/org/") == "repos/org/ab/cd/ef"

    def test_prefix_on_short_oid(self):
        assert transform_key("abc", "lfs") == "lfs/abc"


class TestKeyDeriver:

    def test_no_prefix_is_transform_key(self):
        assert key_deriver() is transform_key
        assert key_deriver("/") is transform_key

    def test_bound_prefix(self):
        derive = key_deriver("objects")
        assert derive(OID) == f"objects/{transform_key(OID)}"
