"""
Core object store logic.

This package is framework-agnostic - it doesn't import boto3 or read the
environment. The store talks to a backend through the ObjectBackend
protocol, so it can be tested in isolation against the in-memory backend.
"""

from .cleanup import TempFileRegistry
from .errors import (
    AuthError,
    InvalidArgumentError,
    LocalFileNotFoundError,
    RemoteObjectExistsError,
    RemoteObjectNotFoundError,
    StorageError,
    TransportError,
)
from .models import (
    ObjectInfo,
    ReplaceResult,
    StoreConfig,
    UploadRequest,
    Visibility,
    parse_ttl,
)
from .store import ObjectBackend, RemoteObjectStore

__all__ = [
    "AuthError",
    "InvalidArgumentError",
    "LocalFileNotFoundError",
    "ObjectBackend",
    "ObjectInfo",
    "RemoteObjectExistsError",
    "RemoteObjectNotFoundError",
    "RemoteObjectStore",
    "ReplaceResult",
    "StorageError",
    "StoreConfig",
    "TempFileRegistry",
    "TransportError",
    "UploadRequest",
    "Visibility",
    "parse_ttl",
]
