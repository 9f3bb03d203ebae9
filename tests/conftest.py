"""Shared fixtures for store tests."""

from unittest.mock import MagicMock

import pytest

from cloudstore.config.settings import get_settings
from cloudstore.core.models import StoreConfig
from cloudstore.core.store import RemoteObjectStore
from cloudstore.dependencies import reset_mock_backend
from cloudstore.infrastructure.storage.client import MockObjectBackend

STORE_ENV_VARS = [
    "S3_BUCKET",
    "S3_REGION",
    "S3_PREFIX",
    "S3_ENDPOINT_URL",
    "S3_DEFAULT_VISIBILITY",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "STORAGE_MOCK_MODE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and .env file."""
    for var in STORE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # StoreSettings reads .env from the working directory
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    reset_mock_backend()
    yield
    get_settings.cache_clear()
    reset_mock_backend()


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig(bucket="test-bucket", region="eu-west-1")


@pytest.fixture
def memory(store_config) -> MockObjectBackend:
    return MockObjectBackend.from_config(store_config)


@pytest.fixture
def backend(memory) -> MagicMock:
    """In-memory backend wrapped in a spy so tests can assert on calls."""
    return MagicMock(wraps=memory)


@pytest.fixture
def store(store_config, backend) -> RemoteObjectStore:
    return RemoteObjectStore(store_config, backend)


@pytest.fixture
def local_file(tmp_path):
    """A small local file ready for upload."""
    path = tmp_path / "uploads" / "report.pdf"
    path.parent.mkdir()
    path.write_bytes(b"%PDF-1.4 quarterly numbers")
    return path
