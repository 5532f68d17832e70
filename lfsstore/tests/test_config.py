"""
Unit Tests: Store Configuration

Tests:
    - Construction-time validation
    - Environment loading (read-only)
    - boto3 session/client keyword arguments
"""

import os

import pytest
from botocore.config import Config as BotoConfig

from lfsstore.reliability.retry import BackoffPolicy
from lfsstore.storage.config import S3StoreConfig


@pytest.fixture
def clean_env(monkeypatch):
    """Environment with no store or AWS variables set."""
    for name in list(os.environ):
        if name.startswith(("LFS_S3_", "AWS_")):
            monkeypatch.delenv(name)
    return monkeypatch


class TestValidation:

    def test_defaults(self):
        config = S3StoreConfig(bucket_name="lfs-objects")
        assert config.region == "us-east-1"
        assert config.acl == "private"
        assert config.max_retries == 5
        assert config.endpoint_url is None
        assert config.check_bucket is False

    def test_frozen(self):
        config = S3StoreConfig(bucket_name="lfs-objects")
        with pytest.raises(AttributeError):
            config.bucket_name = "other"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"bucket_name": ""},
            {"bucket_name": "ab"},
            {"endpoint_url": "localhost:9000"},
            {"access_key_id": "AKIA"},
            {"secret_access_key": "secret"},
            {"max_retries": -1},
            {"connect_timeout_seconds": 0},
            {"read_timeout_seconds": -5},
            {"addressing_style": "dns"},
            {"wait_max_attempts": 0},
            {"wait_base_delay_ms": -1},
            {"wait_timeout_seconds": 0},
        ],
    )
    def test_rejects_invalid(self, overrides):
        kwargs = {"bucket_name": "lfs-objects", **overrides}
        with pytest.raises(ValueError):
            S3StoreConfig(**kwargs)

    def test_zero_retries_allowed(self):
        assert S3StoreConfig(bucket_name="lfs-objects", max_retries=0).max_retries == 0


class TestFromEnv:

    def test_requires_bucket(self, clean_env):
        with pytest.raises(ValueError, match="LFS_S3_BUCKET"):
            S3StoreConfig.from_env()

    def test_minimal(self, clean_env):
        clean_env.setenv("LFS_S3_BUCKET", "lfs-objects")

        config = S3StoreConfig.from_env()

        assert config.bucket_name == "lfs-objects"
        assert config.access_key_id is None
        assert config.acl == "private"

    def test_full(self, clean_env):
        values = {
            "LFS_S3_BUCKET": "lfs-objects",
            "LFS_S3_REGION": "eu-west-1",
            "LFS_S3_ENDPOINT_URL": "http://localhost:9000",
            "LFS_S3_ACCESS_KEY_ID": "minio",
            "LFS_S3_SECRET_ACCESS_KEY": "minio123",
            "LFS_S3_ACL": "public-read",
            "LFS_S3_KEY_PREFIX": "lfs",
            "LFS_S3_MAX_RETRIES": "2",
            "LFS_S3_ADDRESSING_STYLE": "path",
            "LFS_S3_VERIFY_SSL": "false",
            "LFS_S3_CHECK_BUCKET": "yes",
            "LFS_S3_WAIT_MAX_ATTEMPTS": "7",
        }
        for name, value in values.items():
            clean_env.setenv(name, value)

        config = S3StoreConfig.from_env()

        assert config.region == "eu-west-1"
        assert config.endpoint_url == "http://localhost:9000"
        assert config.access_key_id == "minio"
        assert config.secret_access_key == "minio123"
        assert config.acl == "public-read"
        assert config.key_prefix == "lfs"
        assert config.max_retries == 2
        assert config.addressing_style == "path"
        assert config.verify_ssl is False
        assert config.check_bucket is True
        assert config.wait_max_attempts == 7

    def test_aws_credential_fallback(self, clean_env):
        clean_env.setenv("LFS_S3_BUCKET", "lfs-objects")
        clean_env.setenv("AWS_ACCESS_KEY_ID", "AKIAEXAMPLE")
        clean_env.setenv("AWS_SECRET_ACCESS_KEY", "secret")
        clean_env.setenv("AWS_SESSION_TOKEN", "token")

        config = S3StoreConfig.from_env()

        assert config.access_key_id == "AKIAEXAMPLE"
        assert config.session_token == "token"

    def test_custom_prefix(self, clean_env):
        clean_env.setenv("ARTIFACTS_BUCKET", "artifacts")
        assert S3StoreConfig.from_env(prefix="ARTIFACTS").bucket_name == "artifacts"

    def test_environment_not_modified(self, clean_env):
        clean_env.setenv("LFS_S3_BUCKET", "lfs-objects")
        clean_env.setenv("LFS_S3_ACCESS_KEY_ID", "minio")
        clean_env.setenv("LFS_S3_SECRET_ACCESS_KEY", "minio123")
        before = dict(os.environ)

        config = S3StoreConfig.from_env()
        config.session_kwargs()
        config.client_kwargs()

        assert dict(os.environ) == before
        assert "AWS_ACCESS_KEY_ID" not in os.environ

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("LFS_S3_BUCKET", "lfs-objects")
        clean_env.setenv("LFS_S3_MAX_RETRIES", "many")

        with pytest.raises(ValueError):
            S3StoreConfig.from_env()


class TestBotoKwargs:

    def test_session_without_credentials(self):
        kwargs = S3StoreConfig(bucket_name="lfs-objects", region="eu-central-1").session_kwargs()
        assert kwargs == {"region_name": "eu-central-1"}

    def test_session_with_credentials(self):
        config = S3StoreConfig(
            bucket_name="lfs-objects",
            access_key_id="AKIA",
            secret_access_key="secret",
            session_token="token",
        )

        kwargs = config.session_kwargs()

        assert kwargs["aws_access_key_id"] == "AKIA"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert kwargs["aws_session_token"] == "token"

    def test_client_kwargs(self):
        config = S3StoreConfig(
            bucket_name="lfs-objects",
            endpoint_url="https://minio.internal:9000",
            max_retries=3,
            addressing_style="path",
            verify_ssl=False,
        )

        kwargs = config.client_kwargs()

        assert kwargs["endpoint_url"] == "https://minio.internal:9000"
        assert kwargs["verify"] is False
        boto_config = kwargs["config"]
        assert isinstance(boto_config, BotoConfig)
        assert boto_config.retries == {"max_attempts": 3, "mode": "standard"}
        assert boto_config.s3 == {"addressing_style": "path"}
        assert boto_config.connect_timeout == 5

    def test_client_kwargs_aws_defaults(self):
        kwargs = S3StoreConfig(bucket_name="lfs-objects").client_kwargs()
        assert "endpoint_url" not in kwargs
        assert "verify" not in kwargs
        assert kwargs["use_ssl"] is True

    def test_wait_policy(self):
        config = S3StoreConfig(
            bucket_name="lfs-objects",
            wait_base_delay_ms=50,
            wait_max_delay_ms=800,
            wait_max_attempts=4,
            wait_timeout_seconds=10,
        )

        policy = config.wait_policy()

        assert isinstance(policy, BackoffPolicy)
        assert policy.max_attempts == 4
        assert policy.base_delay_ms == 50
        assert policy.max_delay_ms == 800
        assert policy.timeout_s == 10.0
