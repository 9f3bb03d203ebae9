"""
Remote object store facade.

This module holds the store itself: the handful of file operations callers
actually want (get, put, delete, url, presigned URL, replace) expressed in
terms of a small backend interface. It doesn't know about boto3; the S3 and
in-memory backends live in infrastructure.storage and are injected.

Every call is a synchronous, single request/response against the backend.
There is no retry, caching or batching here. Whatever the backend's
transport does is what you get.
"""

import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Mapping, Optional, Protocol, Union

from .cleanup import PathLike, TempFileRegistry
from .errors import (
    InvalidArgumentError,
    LocalFileNotFoundError,
    RemoteObjectExistsError,
    RemoteObjectNotFoundError,
    StorageError,
    TransportError,
)
from .models import (
    DEFAULT_PRESIGN_TTL,
    ObjectInfo,
    ReplaceResult,
    StoreConfig,
    TTLValue,
    UploadRequest,
    Visibility,
    parse_ttl,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectBackend(Protocol):
    """
    Interface for the wrapped object-storage SDK.

    Paths are relative to the store's prefix; the backend is responsible
    for turning them into bucket keys. Implementations translate their own
    exceptions into the types in core.errors.
    """

    def write_stream(self, path: str, stream: BinaryIO, options: Mapping[str, Any]) -> bool:
        """Upload a stream. Returns False if the write was refused without an SDK error."""
        ...

    def read(self, path: str) -> bytes:
        ...

    def read_stream(self, path: str) -> BinaryIO:
        ...

    def has(self, path: str) -> bool:
        ...

    def delete(self, path: str) -> bool:
        ...

    def get_timestamp(self, path: str) -> int:
        """Last-modified time as Unix seconds."""
        ...

    def get_mime_type(self, path: str) -> str:
        ...

    def get_object_url(self, path: str) -> str:
        """Canonical (unsigned) URL of the object."""
        ...

    def create_presigned_url(
        self,
        path: str,
        expires_in: int,
        params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Time-limited signed GET URL. ``params`` are extra request parameters."""
        ...


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class RemoteObjectStore:
    """
    File operations against a single bucket.

    The only state the store holds besides its config and backend is the
    stack of open cleanup scopes. That stack lives in a context variable,
    so each thread (or asyncio task) sees only the scopes it opened itself.
    """

    def __init__(self, config: StoreConfig, backend: ObjectBackend) -> None:
        self._config = config
        self._backend = backend
        self._cleanup_scopes: ContextVar[tuple[TempFileRegistry, ...]] = ContextVar(
            f"cleanup_scopes_{id(self)}", default=()
        )

        logger.info(
            "Initialized object store",
            extra={
                "bucket": config.bucket,
                "prefix": config.prefix,
                "region": config.region,
            }
        )

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def backend(self) -> ObjectBackend:
        return self._backend

    # -- reads ---------------------------------------------------------------

    def info(self, path: str) -> ObjectInfo:
        """
        Timestamp and MIME type of an existing object.

        Raises RemoteObjectNotFoundError if nothing is stored at ``path``.
        """
        self._require_path(path)
        return ObjectInfo(
            timestamp=self._backend.get_timestamp(path),
            mimetype=self._backend.get_mime_type(path),
        )

    def get(self, path: str, as_stream: bool = False) -> Union[bytes, BinaryIO]:
        """
        Fetch an object's contents.

        With ``as_stream`` the caller gets an open binary stream and is
        responsible for closing it.
        """
        self._require_path(path)
        if as_stream:
            return self._backend.read_stream(path)
        return self._backend.read(path)

    def check(self, path: str) -> bool:
        """Does an object exist at ``path``?"""
        if not path:
            return False
        return bool(self._backend.has(path))

    # Same predicate under the name most callers reach for first.
    has = check

    def url(self, path: str) -> str:
        self._require_path(path)
        return self._backend.get_object_url(path)

    def presigned_url(
        self,
        path: Optional[str],
        ttl: TTLValue = DEFAULT_PRESIGN_TTL,
        for_download: bool = True,
    ) -> str:
        """
        Time-limited signed GET URL for ``path``.

        With ``for_download`` the response is forced to an attachment named
        after the object's basename, and caching is disabled.
        """
        self._require_path(path)
        expires_in = parse_ttl(ttl)

        params: dict[str, str] = {}
        if for_download:
            filename = os.path.basename(path.rstrip("/"))
            params["ResponseContentDisposition"] = f"attachment; filename={filename}"
            params["ResponseCacheControl"] = "No-cache"

        url = self._backend.create_presigned_url(path, expires_in, params)

        logger.debug(
            "Generated presigned URL",
            extra={"path": path, "expires_in": expires_in, "download": for_download}
        )

        return url

    # -- writes --------------------------------------------------------------

    def put(
        self,
        local_path: PathLike,
        remote_path: str,
        visibility: Union[Visibility, str, None] = None,
        metadata: Optional[Mapping[str, str]] = None,
        track_for_cleanup: bool = True,
    ) -> str:
        """
        Upload a local file and return the object's URL.

        Never overwrites: if ``remote_path`` already holds an object this
        raises RemoteObjectExistsError. Use replace() to overwrite.

        Args:
            local_path: File to upload
            remote_path: Destination, relative to the store's prefix
            visibility: public/private, the store's default when empty
            metadata: User metadata attached to the object
            track_for_cleanup: Register ``local_path`` on the active
                cleanup scope once the upload succeeds
        """
        request = UploadRequest(
            local_path=Path(local_path),
            remote_path=remote_path,
            visibility=(
                Visibility.parse(visibility)
                if visibility
                else self._config.default_visibility
            ),
            metadata=metadata,
            track_for_cleanup=track_for_cleanup,
        )

        if not request.local_path.is_file():
            raise LocalFileNotFoundError(
                f"Local file not found: {request.local_path}",
                key=remote_path,
            )

        if self._backend.has(remote_path):
            raise RemoteObjectExistsError(
                f"Remote object already exists: {remote_path}",
                key=remote_path,
            )

        return self._upload(request)

    def delete(self, path: str) -> bool:
        """
        Delete an object.

        Checks for the object first; a missing object raises
        RemoteObjectNotFoundError and no delete request is sent.
        """
        self._require_path(path)

        if not self._backend.has(path):
            raise RemoteObjectNotFoundError(f"Remote object not found: {path}", key=path)

        deleted = bool(self._backend.delete(path))

        logger.info("Deleted object", extra={"path": path, "deleted": deleted})

        return deleted

    def replace(
        self,
        local_path: PathLike,
        remote_path: str,
        visibility: Union[Visibility, str, None] = None,
        metadata: Optional[Mapping[str, str]] = None,
        track_for_cleanup: bool = True,
    ) -> ReplaceResult:
        """
        Upload a local file, deleting whatever is at ``remote_path`` first.

        The delete and the upload are two separate requests. If the upload
        fails after the delete went through, the old object is gone and
        nothing replaces it; the upload error propagates.
        """
        self._require_path(remote_path)

        if not Path(local_path).is_file():
            raise LocalFileNotFoundError(
                f"Local file not found: {local_path}",
                key=remote_path,
            )

        notes: list[str] = []
        if self.check(remote_path):
            self.delete(remote_path)
            notes.append(
                f"Remote file already exists ({remote_path}) "
                f"so replaced using ({local_path})"
            )

        try:
            url = self.put(
                local_path,
                remote_path,
                visibility=visibility,
                metadata=metadata,
                track_for_cleanup=track_for_cleanup,
            )
        except StorageError:
            if notes:
                logger.error(
                    "Upload failed after deleting existing object",
                    extra={"path": remote_path, "local_path": str(local_path)}
                )
            raise

        return ReplaceResult(url=url, notes=notes)

    # -- cleanup scopes ------------------------------------------------------

    @contextmanager
    def cleanup_scope(self) -> Iterator[TempFileRegistry]:
        """
        Collect uploaded local files and delete them when the block exits.

        Usage:
            with store.cleanup_scope() as scope:
                store.put("/tmp/report.pdf", "reports/report.pdf")
            # /tmp/report.pdf is gone here

        Scopes nest; uploads register on the innermost one.
        """
        registry = TempFileRegistry()
        token = self._cleanup_scopes.set(self._cleanup_scopes.get() + (registry,))
        try:
            yield registry
        finally:
            self._cleanup_scopes.reset(token)
            registry.sweep()

    @property
    def active_cleanup_scope(self) -> Optional[TempFileRegistry]:
        scopes = self._cleanup_scopes.get()
        return scopes[-1] if scopes else None

    # -- internals -----------------------------------------------------------

    def _upload(self, request: UploadRequest) -> str:
        with request.local_path.open("rb") as stream:
            written = self._backend.write_stream(
                request.remote_path,
                stream,
                request.write_options,
            )

        if not written:
            logger.error(
                "Upload rejected",
                extra={"path": request.remote_path, "local_path": str(request.local_path)}
            )
            raise TransportError(
                f"Write rejected for {request.remote_path}",
                key=request.remote_path,
            )

        logger.info(
            "Uploaded file",
            extra={
                "path": request.remote_path,
                "local_path": str(request.local_path),
                "visibility": request.visibility.value,
            }
        )

        if request.track_for_cleanup:
            scope = self.active_cleanup_scope
            if scope is not None:
                scope.register(request.local_path)
            else:
                logger.debug(
                    "No cleanup scope open, not tracking local file",
                    extra={"local_path": str(request.local_path)}
                )

        return self._backend.get_object_url(request.remote_path)

    @staticmethod
    def _require_path(path: Optional[str]) -> None:
        if not path:
            raise InvalidArgumentError("Path cannot be empty")
