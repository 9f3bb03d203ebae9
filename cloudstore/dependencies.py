"""
Store construction.

Callers shouldn't have to know which backend they get or where its
settings came from. This module resolves configuration (explicit mapping
first, then environment), picks the backend, and hands back a ready
RemoteObjectStore.
"""

import logging
from typing import Any, Mapping, Optional

from .config.settings import StoreSettings, get_settings, resolve_store_config
from .core.store import RemoteObjectStore
from .infrastructure.storage.client import (
    MockObjectBackend,
    StoredObject,
    create_object_backend,
)

logger = logging.getLogger(__name__)

# Shared in-memory objects, keyed by bucket, so mock-mode stores see each
# other's uploads. Each store still gets a backend with its own prefix.
_mock_buckets: dict[str, dict[str, StoredObject]] = {}


def get_object_store(
    config: Optional[Mapping[str, Any]] = None,
    *,
    settings: Optional[StoreSettings] = None,
    mock_mode: Optional[bool] = None,
) -> RemoteObjectStore:
    """
    Build a store from an explicit config mapping and the environment.

    Args:
        config: Explicit settings (``S3_BUCKET``, ``S3_REGION``,
            ``AWS_ACCESS_KEY_ID``, ``AWS_SECRET_ACCESS_KEY``, ``prefix``, ...).
            Empty values fall back to the environment.
        settings: Environment settings, defaults to get_settings()
        mock_mode: Force the in-memory backend on or off. Defaults to
            STORAGE_MOCK_MODE.

    Raises:
        InvalidArgumentError: if no bucket can be resolved from any source
    """
    settings = settings or get_settings()
    store_config = resolve_store_config(config, settings.as_source())

    if mock_mode is None:
        mock_mode = settings.storage_mock_mode

    if mock_mode:
        backend = MockObjectBackend.from_config(store_config, buckets=_mock_buckets)
        logger.info(
            "Using shared mock storage",
            extra={"bucket": store_config.bucket, "prefix": store_config.prefix}
        )
    else:
        backend = create_object_backend(store_config)

    return RemoteObjectStore(store_config, backend)


def reset_mock_backend() -> None:
    """Forget every object held by mock-mode stores. Intended for tests."""
    _mock_buckets.clear()
