"""
Object storage backends.

Supports AWS S3 and S3-compatible services (MinIO, R2) through boto3.
Includes an in-memory backend for local development without credentials.

Both implement the ObjectBackend protocol from core.store. The S3 backend
is where SDK exceptions stop: botocore errors are translated into the
core.errors taxonomy here and nowhere else.
"""

import io
import logging
import mimetypes
import time
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Mapping, Optional
from urllib.parse import quote, urlencode

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from ...core.errors import (
    AuthError,
    RemoteObjectNotFoundError,
    StorageError,
    TransportError,
)
from ...core.models import StoreConfig, Visibility
from ...core.store import ObjectBackend

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}

_ERROR_CODE_MAP = {
    "NoSuchKey": RemoteObjectNotFoundError,
    "NotFound": RemoteObjectNotFoundError,
    "404": RemoteObjectNotFoundError,
    "NoSuchBucket": RemoteObjectNotFoundError,
    "AccessDenied": AuthError,
    "403": AuthError,
    "InvalidAccessKeyId": AuthError,
    "SignatureDoesNotMatch": AuthError,
    "ExpiredToken": AuthError,
}


def _guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or DEFAULT_CONTENT_TYPE


class S3ObjectBackend:
    """
    S3 object storage backend.

    Uses boto3 with v4 signatures. When ``endpoint_url`` is set the client
    switches to path-style addressing, which is what MinIO and R2 expect.

    Keys are ``{prefix}/{path}``, so one store only ever sees its own
    sub-namespace of the bucket.
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config

        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"} if config.endpoint_url else {},
        )

        client_kwargs: dict[str, Any] = {"config": boto_config}
        if config.region:
            client_kwargs["region_name"] = config.region
        if config.endpoint_url:
            client_kwargs["endpoint_url"] = config.endpoint_url
        # without explicit keys boto3 falls back to its own credential chain
        if config.has_credentials:
            client_kwargs["aws_access_key_id"] = config.access_key_id
            client_kwargs["aws_secret_access_key"] = config.secret_access_key

        self._s3_client = boto3.client("s3", **client_kwargs)

        logger.info(
            "Initialized S3 storage backend",
            extra={
                "bucket": config.bucket,
                "region": config.region,
                "endpoint": config.endpoint_url,
            }
        )

    def write_stream(self, path: str, stream: BinaryIO, options: Mapping[str, Any]) -> bool:
        key = self._key(path)
        visibility = Visibility.parse(options.get("visibility"))

        extra_args: dict[str, Any] = {
            "ACL": visibility.acl,
            "ContentType": options.get("content_type") or _guess_content_type(path),
        }
        if options.get("content_disposition"):
            extra_args["ContentDisposition"] = options["content_disposition"]
        if options.get("metadata"):
            extra_args["Metadata"] = {
                str(k): str(v) for k, v in options["metadata"].items()
            }

        # boto3 reports a refused upload as ClientError, never as a False return
        try:
            self._s3_client.upload_fileobj(
                stream,
                self._config.bucket,
                key,
                ExtraArgs=extra_args,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "S3 upload failed",
                extra={"bucket": self._config.bucket, "key": key, "error": str(e)}
            )
            raise self._translate_error(e, key) from e

        logger.debug(
            "Uploaded object",
            extra={"bucket": self._config.bucket, "key": key, "acl": visibility.acl}
        )

        return True

    def read(self, path: str) -> bytes:
        return self._get_object(path)["Body"].read()

    def read_stream(self, path: str) -> BinaryIO:
        return self._get_object(path)["Body"]

    def has(self, path: str) -> bool:
        key = self._key(path)
        try:
            self._s3_client.head_object(Bucket=self._config.bucket, Key=key)
            return True
        except ClientError as e:
            if self._error_code(e) in _MISSING_CODES:
                return False
            raise self._translate_error(e, key) from e
        except BotoCoreError as e:
            raise self._translate_error(e, key) from e

    def delete(self, path: str) -> bool:
        key = self._key(path)
        try:
            self._s3_client.delete_object(Bucket=self._config.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, key) from e
        return True

    def get_timestamp(self, path: str) -> int:
        last_modified = self._head_object(path)["LastModified"]
        return int(last_modified.timestamp())

    def get_mime_type(self, path: str) -> str:
        return self._head_object(path).get("ContentType") or DEFAULT_CONTENT_TYPE

    def get_object_url(self, path: str) -> str:
        """
        Unsigned URL of the object.

        Built locally rather than asked of S3; it is only reachable if the
        object is public.
        """
        key = quote(self._key(path))
        bucket = self._config.bucket

        if self._config.endpoint_url:
            return f"{self._config.endpoint_url.rstrip('/')}/{bucket}/{key}"
        if self._config.region:
            return f"https://{bucket}.s3.{self._config.region}.amazonaws.com/{key}"
        return f"https://{bucket}.s3.amazonaws.com/{key}"

    def create_presigned_url(
        self,
        path: str,
        expires_in: int,
        params: Optional[Mapping[str, str]] = None,
    ) -> str:
        key = self._key(path)
        request_params = {"Bucket": self._config.bucket, "Key": key}
        if params:
            request_params.update(params)

        try:
            return self._s3_client.generate_presigned_url(
                "get_object",
                Params=request_params,
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"key": key, "error": str(e)}
            )
            raise self._translate_error(e, key) from e

    def _key(self, path: str) -> str:
        path = path.lstrip("/")
        prefix = self._config.prefix.strip("/")
        return f"{prefix}/{path}" if prefix else path

    def _get_object(self, path: str) -> dict:
        key = self._key(path)
        try:
            return self._s3_client.get_object(Bucket=self._config.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to read object",
                extra={"key": key, "error": str(e)}
            )
            raise self._translate_error(e, key) from e

    def _head_object(self, path: str) -> dict:
        key = self._key(path)
        try:
            return self._s3_client.head_object(Bucket=self._config.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, key) from e

    @staticmethod
    def _error_code(error: ClientError) -> str:
        return str(error.response.get("Error", {}).get("Code", ""))

    def _translate_error(self, error: Exception, key: Optional[str] = None) -> StorageError:
        if isinstance(error, ClientError):
            exc_cls = _ERROR_CODE_MAP.get(self._error_code(error), TransportError)
        elif isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            exc_cls = AuthError
        else:
            exc_cls = TransportError
        return exc_cls(str(error), key=key, cause=error)


# ---------------------------------------------------------------------------
# Mock Backend for Local Development
# ---------------------------------------------------------------------------

@dataclass
class StoredObject:
    """An object held by the in-memory backend."""
    body: bytes
    content_type: str = DEFAULT_CONTENT_TYPE
    visibility: Visibility = Visibility.PUBLIC
    content_disposition: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)
    last_modified: int = field(default_factory=lambda: int(time.time()))


class MockObjectBackend:
    """
    In-memory object storage.

    Lets the store run end to end without a bucket. Objects live in a dict
    keyed by the full (prefixed) key, and URLs use a ``mock://`` scheme.
    Several backends can share one ``buckets`` mapping (bucket name to
    objects dict); each still applies its own bucket and prefix.
    Presigned URLs carry their parameters in the query string so tests
    can check what would have been signed.

    Not suitable for production, but fine for development and testing.
    """

    def __init__(
        self,
        bucket: str = "mock-bucket",
        prefix: str = "",
        buckets: Optional[dict[str, dict[str, StoredObject]]] = None,
    ) -> None:
        self._bucket = bucket
        self._prefix = prefix.strip("/")
        if buckets is None:
            buckets = {}
        self.objects: dict[str, StoredObject] = buckets.setdefault(bucket, {})
        self.reject_writes = False
        logger.info("Initialized mock storage backend (in-memory)")

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        buckets: Optional[dict[str, dict[str, StoredObject]]] = None,
    ) -> "MockObjectBackend":
        return cls(bucket=config.bucket, prefix=config.prefix, buckets=buckets)

    def write_stream(self, path: str, stream: BinaryIO, options: Mapping[str, Any]) -> bool:
        if self.reject_writes:
            return False

        key = self._key(path)
        self.objects[key] = StoredObject(
            body=stream.read(),
            content_type=options.get("content_type") or _guess_content_type(path),
            visibility=Visibility.parse(options.get("visibility")),
            content_disposition=options.get("content_disposition"),
            metadata=dict(options.get("metadata") or {}),
        )

        logger.debug(
            "Stored object in mock storage",
            extra={"key": key, "size_bytes": len(self.objects[key].body)}
        )

        return True

    def read(self, path: str) -> bytes:
        return self._lookup(path).body

    def read_stream(self, path: str) -> BinaryIO:
        return io.BytesIO(self._lookup(path).body)

    def has(self, path: str) -> bool:
        return self._key(path) in self.objects

    def delete(self, path: str) -> bool:
        return self.objects.pop(self._key(path), None) is not None

    def get_timestamp(self, path: str) -> int:
        return self._lookup(path).last_modified

    def get_mime_type(self, path: str) -> str:
        return self._lookup(path).content_type

    def get_object_url(self, path: str) -> str:
        return f"mock://{self._bucket}/{quote(self._key(path))}"

    def create_presigned_url(
        self,
        path: str,
        expires_in: int,
        params: Optional[Mapping[str, str]] = None,
    ) -> str:
        query = {"X-Amz-Expires": str(expires_in)}
        if params:
            query.update(params)
        return f"{self.get_object_url(path)}?{urlencode(query)}"

    def _key(self, path: str) -> str:
        path = path.lstrip("/")
        return f"{self._prefix}/{path}" if self._prefix else path

    def _lookup(self, path: str) -> StoredObject:
        key = self._key(path)
        if key not in self.objects:
            raise RemoteObjectNotFoundError(f"Object not found: {key}", key=key)
        return self.objects[key]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_backend(
    config: StoreConfig,
    mock_mode: bool = False,
) -> ObjectBackend:
    """
    Create the backend for a store.

    Args:
        config: Store configuration
        mock_mode: If True, return an in-memory backend

    Returns:
        ObjectBackend implementation (S3 or Mock)
    """
    if mock_mode:
        return MockObjectBackend.from_config(config)

    return S3ObjectBackend(config)
