"""
Error taxonomy for object store operations.

Every failure the store can report maps to one of these types, so callers
can tell "you passed an empty path" apart from "the bucket said no" without
inspecting messages. SDK exceptions are translated at the backend boundary
and chained as ``cause``.
"""

from typing import Optional


class StorageError(Exception):
    """Base exception for all object store operations."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.key = key
        self.cause = cause
        super().__init__(message)


class InvalidArgumentError(StorageError, ValueError):
    """Raised for empty paths, unparseable TTLs and unknown visibility values."""


class LocalFileNotFoundError(StorageError, FileNotFoundError):
    """Raised when the local source of an upload does not exist."""


class RemoteObjectNotFoundError(StorageError):
    """Raised when a remote object is required but absent."""


class RemoteObjectExistsError(StorageError):
    """Raised when put() targets a path that already holds an object."""


class TransportError(StorageError):
    """Raised when the backend rejects a write or cannot be reached."""


class AuthError(StorageError):
    """Raised when credentials are missing, invalid or denied."""
