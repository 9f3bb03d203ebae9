"""
Store configuration using Pydantic settings.

Configuration is resolved from an ordered list of sources: whatever the
caller passes explicitly comes first, then the environment (and ``.env``),
loaded through Pydantic's BaseSettings. For each key the first source with
a non-empty value wins, so an explicit empty string still falls through to
the environment.
"""

import logging
from functools import lru_cache
from typing import Any, Mapping, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.models import DEFAULT_PREFIX, StoreConfig, Visibility

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# logical key -> names accepted in a config mapping, in lookup order
CONFIG_KEYS: dict[str, tuple[str, ...]] = {
    "bucket": ("S3_BUCKET",),
    "region": ("S3_REGION",),
    "access_key_id": ("AWS_ACCESS_KEY_ID", "S3_KEY"),
    "secret_access_key": ("AWS_SECRET_ACCESS_KEY", "S3_SECRET"),
    "prefix": ("prefix", "S3_PREFIX"),
    "endpoint_url": ("S3_ENDPOINT_URL",),
    "visibility": ("visibility", "S3_DEFAULT_VISIBILITY"),
}


class StoreSettings(BaseSettings):
    """
    Store settings loaded from environment variables.

    All settings can be overridden via environment variables of the same
    name in upper case (``S3_BUCKET``, ``AWS_ACCESS_KEY_ID``, ...).
    """

    # Bucket
    s3_bucket: str = Field(
        default="",
        description="Bucket the store reads from and writes to"
    )
    s3_region: str = Field(
        default="",
        description="Bucket region, e.g. eu-west-1"
    )
    s3_prefix: str = Field(
        default=DEFAULT_PREFIX,
        description="Key prefix that scopes the store to a sub-namespace of the bucket"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint for S3-compatible services (MinIO, R2). Empty means AWS."
    )
    s3_default_visibility: str = Field(
        default=Visibility.PUBLIC.value,
        description="Visibility applied to uploads that don't specify one (public or private)"
    )

    # Credentials
    aws_access_key_id: str = Field(
        default="",
        description="Access key. Leave empty to use boto3's default credential chain."
    )
    aws_secret_access_key: str = Field(
        default="",
        description="Secret key paired with aws_access_key_id"
    )

    # Application Behavior
    storage_mock_mode: bool = Field(
        default=False,
        description="Use the in-memory backend instead of S3. Enables local dev without a bucket."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def as_source(self) -> dict[str, Any]:
        """Settings as a config mapping, for use with resolve_store_config()."""
        return {
            "S3_BUCKET": self.s3_bucket,
            "S3_REGION": self.s3_region,
            "AWS_ACCESS_KEY_ID": self.aws_access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.aws_secret_access_key,
            "prefix": self.s3_prefix,
            "S3_ENDPOINT_URL": self.s3_endpoint_url,
            "visibility": self.s3_default_visibility,
        }

    def missing_fields(self) -> list[str]:
        """
        Required environment names that are unset.

        Credentials aren't listed: without them boto3 falls back to its
        own chain (shared config, instance profile, IRSA).
        """
        missing = []

        if self.storage_mock_mode:
            return missing

        if not self.s3_bucket:
            missing.append("S3_BUCKET")
        if not self.s3_region and not self.s3_endpoint_url:
            missing.append("S3_REGION")

        return missing


@lru_cache()
def get_settings() -> StoreSettings:
    """
    Get cached settings instance.

    Settings are read once per process. For tests, call
    get_settings.cache_clear() after changing the environment.
    """
    return StoreSettings()


def _lookup(source: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        value = source.get(name)
        if value not in (None, ""):
            return value
    return None


def resolve_store_config(*sources: Optional[Mapping[str, Any]]) -> StoreConfig:
    """
    Build a StoreConfig from config mappings in precedence order.

    Each key takes the first non-empty value found, scanning sources left
    to right. ``None`` sources are skipped, so an optional explicit config
    can be passed straight through.

    Example:
        config = resolve_store_config(
            {"S3_BUCKET": "reports"},
            get_settings().as_source(),
        )
    """
    resolved: dict[str, Any] = {}
    for logical_key, names in CONFIG_KEYS.items():
        for source in sources:
            if not source:
                continue
            value = _lookup(source, names)
            if value is not None:
                resolved[logical_key] = value
                break

    return StoreConfig(
        bucket=resolved.get("bucket", ""),
        region=resolved.get("region"),
        access_key_id=resolved.get("access_key_id"),
        secret_access_key=resolved.get("secret_access_key"),
        prefix=resolved.get("prefix", DEFAULT_PREFIX),
        default_visibility=Visibility.parse(resolved.get("visibility")),
        endpoint_url=resolved.get("endpoint_url"),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for scripts and applications using the store.

    The library itself never calls this; it only creates module loggers.
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level_name, logging.INFO),
    )
