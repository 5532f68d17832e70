"""
Unit Tests: Core Types and Errors

Tests:
    - Result monad behavior
    - ContentHash / MetaObject identity
    - Error hierarchy and serialization
"""

import hashlib

import pytest

from lfsstore.core.errors import (
    BackendError,
    BackendReadError,
    BackendUnavailableError,
    BackendWriteError,
    ConfigError,
    ContentSourceError,
    ErrorCode,
    HashMismatchError,
    IntegrityError,
    LfsStoreError,
    NotFoundError,
    SizeMismatchError,
)
from lfsstore.core.types import ContentHash, Err, MetaObject, Ok

OID = "6ae8a75555209fd6c44157c0aed8016e763ff435a19cf186f76863140143ff72"


class TestResult:

    def test_ok(self):
        result = Ok(3)
        assert result.is_ok() and not result.is_err()
        assert result.unwrap() == 3
        assert result.map(lambda x: x * 2) == Ok(6)
        assert result.flat_map(lambda x: Err("nope")) == Err("nope")

    def test_err(self):
        result = Err("failed")
        assert result.is_err()
        assert result.unwrap_or(7) == 7
        assert result.map(lambda x: x * 2) is result
        with pytest.raises(RuntimeError, match="failed"):
            result.unwrap()

    def test_map_err(self):
        assert Err("failed").map_err(str.upper) == Err("FAILED")
        assert Ok(1).map_err(str.upper) == Ok(1)

    def test_pattern_matching(self):
        match Err(NotFoundError.missing(OID, "k")):
            case Ok(_):
                matched = "ok"
            case Err(NotFoundError()):
                matched = "not-found"
            case _:
                matched = "other"
        assert matched == "not-found"


class TestContentHash:

    def test_reference_content(self):
        assert ContentHash.compute(b"test content").to_hex() == OID

    def test_from_hex(self):
        parsed = ContentHash.from_hex(OID).unwrap()
        assert str(parsed) == OID

    @pytest.mark.parametrize("value", ["abc", "z" * 64])
    def test_from_hex_invalid(self, value):
        assert ContentHash.from_hex(value).is_err()

    def test_digest_length(self):
        with pytest.raises(ValueError):
            ContentHash(digest=b"short")


class TestMetaObject:

    def test_for_content(self):
        meta = MetaObject.for_content(b"test content")
        assert meta == MetaObject(oid=OID, size=12)

    def test_hashable(self):
        assert len({MetaObject(OID, 12), MetaObject(OID, 12)}) == 1

    def test_str(self):
        assert str(MetaObject(OID, 12)) == "6ae8a7555520(12B)"


class TestErrors:

    def test_hierarchy(self):
        assert issubclass(SizeMismatchError, IntegrityError)
        assert issubclass(HashMismatchError, IntegrityError)
        assert issubclass(BackendWriteError, BackendError)
        assert issubclass(BackendReadError, BackendError)
        assert issubclass(BackendUnavailableError, BackendError)
        assert not issubclass(NotFoundError, BackendError)
        assert not issubclass(ContentSourceError, IntegrityError)
        for cls in (IntegrityError, NotFoundError, BackendError, ContentSourceError, ConfigError):
            assert issubclass(cls, LfsStoreError)
            assert issubclass(cls, Exception)

    def test_factories_pick_subclass(self):
        assert type(IntegrityError.size_mismatch(OID, 14, 12)) is SizeMismatchError
        assert type(IntegrityError.hash_mismatch(OID, "00" * 32)) is HashMismatchError
        assert type(BackendError.read_failed("k")) is BackendReadError
        assert type(BackendError.write_failed("k", "put_object")) is BackendWriteError
        assert type(ContentSourceError.unreadable(OID)) is ContentSourceError

    def test_to_dict(self):
        cause = ValueError("bad")
        error = BackendError.read_failed("6a/e8/a7", cause=cause)

        data = error.to_dict()

        assert data["code"] == "BACKEND_READ_FAILED"
        assert data["code_value"] == ErrorCode.BACKEND_READ_FAILED.value
        assert data["context"] == {"key": "6a/e8/a7"}
        assert data["cause"] == "ValueError: bad"

    def test_str(self):
        error = NotFoundError.missing(OID, "k")
        assert str(error).startswith("[OBJECT_NOT_FOUND] Object 6ae8a7")
        assert f"id={error.error_id[:8]}" in str(error)

    def test_unique_ids(self):
        assert NotFoundError.missing(OID, "k").error_id != NotFoundError.missing(OID, "k").error_id

    def test_unavailable_context(self):
        error = BackendError.unavailable("k", expected_present=False, attempts=4, waited_ms=123.46)
        assert error.context["expected"] == "absent"
        assert error.context["waited_ms"] == 123.5

    def test_raisable(self):
        with pytest.raises(ConfigError):
            raise ConfigError.bucket_unreachable("lfs-objects")

    def test_sha256_reference(self):
        assert hashlib.sha256(b"test content").hexdigest() == OID
