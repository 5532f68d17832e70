"""Shared fixtures: an in-memory bucket and a store that never sleeps."""

import pytest

from lfsstore.core.types import MetaObject
from lfsstore.storage import InMemoryObjectBackend, S3ContentStore, S3StoreConfig

BUCKET = "lfs-objects"

CONTENT = b"test content"
OID = "6ae8a75555209fd6c44157c0aed8016e763ff435a19cf186f76863140143ff72"


@pytest.fixture
def backend():
    return InMemoryObjectBackend(buckets=[BUCKET])


@pytest.fixture
def config():
    return S3StoreConfig(
        bucket_name=BUCKET,
        wait_base_delay_ms=0,
        wait_max_delay_ms=0,
        wait_max_attempts=5,
    )


@pytest.fixture
def store(config, backend):
    return S3ContentStore.open(config, client=backend).unwrap()


@pytest.fixture
def meta():
    return MetaObject(oid=OID, size=len(CONTENT))
