"""
Object storage backends for the store.

S3 (and S3-compatible endpoints) via boto3, plus an in-memory mock for
local development without credentials.
"""

from .client import (
    MockObjectBackend,
    S3ObjectBackend,
    StoredObject,
    create_object_backend,
)

__all__ = [
    "MockObjectBackend",
    "S3ObjectBackend",
    "StoredObject",
    "create_object_backend",
]
