"""
cloudstore - a small facade over S3-compatible object storage.

This package contains:
- core: The store, its models, errors and cleanup scopes (no SDK imports)
- infrastructure: boto3 and in-memory backends
- config: Settings and configuration resolution
- dependencies: Wiring config and backends into a ready store
"""

from .core import (
    AuthError,
    InvalidArgumentError,
    LocalFileNotFoundError,
    ObjectInfo,
    RemoteObjectExistsError,
    RemoteObjectNotFoundError,
    RemoteObjectStore,
    ReplaceResult,
    StorageError,
    StoreConfig,
    TempFileRegistry,
    TransportError,
    Visibility,
)
from .dependencies import get_object_store

__version__ = "0.1.0"

__all__ = [
    "AuthError",
    "InvalidArgumentError",
    "LocalFileNotFoundError",
    "ObjectInfo",
    "RemoteObjectExistsError",
    "RemoteObjectNotFoundError",
    "RemoteObjectStore",
    "ReplaceResult",
    "StorageError",
    "StoreConfig",
    "TempFileRegistry",
    "TransportError",
    "Visibility",
    "get_object_store",
]
