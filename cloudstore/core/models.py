"""
Value objects for the object store.

These models describe what the store is configured with and what it hands
back. They carry no SDK types, so the store logic can be exercised against
any backend (including the in-memory one used in tests).
"""

import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

from .errors import InvalidArgumentError

DEFAULT_PREFIX = "public"
DEFAULT_PRESIGN_TTL = "5 seconds"


class Visibility(Enum):
    """Access-control flag applied to an uploaded object."""
    PUBLIC = "public"
    PRIVATE = "private"

    @property
    def acl(self) -> str:
        """S3 canned ACL for this visibility."""
        return "public-read" if self is Visibility.PUBLIC else "private"

    @classmethod
    def parse(cls, value: Union["Visibility", str, None]) -> "Visibility":
        """Accept an enum member or its string value (case-insensitive)."""
        if isinstance(value, Visibility):
            return value
        if not value:
            return cls.PUBLIC
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown visibility '{value}' (expected 'public' or 'private')"
            )


@dataclass(frozen=True)
class StoreConfig:
    """
    Connection settings for one bucket.

    Frozen because a store is bound to a single bucket and prefix for
    its whole lifetime. Build a new store to talk to a different bucket.
    """
    bucket: str
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    prefix: str = DEFAULT_PREFIX
    default_visibility: Visibility = Visibility.PUBLIC
    endpoint_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.bucket:
            raise InvalidArgumentError("Bucket name is required")

    @property
    def has_credentials(self) -> bool:
        """True when both halves of the key pair were supplied explicitly."""
        return bool(self.access_key_id and self.secret_access_key)


@dataclass(frozen=True)
class UploadRequest:
    """A single upload, built fresh for each put() call."""
    local_path: Path
    remote_path: str
    visibility: Visibility = Visibility.PUBLIC
    metadata: Optional[Mapping[str, str]] = None
    track_for_cleanup: bool = True

    def __post_init__(self) -> None:
        if not self.remote_path:
            raise InvalidArgumentError("Remote path cannot be empty")

    @property
    def write_options(self) -> dict:
        """Options handed to the backend's write_stream()."""
        options = {
            "visibility": self.visibility,
            "content_disposition": "attachment",
        }
        if self.metadata:
            options["metadata"] = dict(self.metadata)
        return options


@dataclass(frozen=True)
class ObjectInfo:
    """Last-modified time (Unix seconds) and MIME type of a stored object."""
    timestamp: int
    mimetype: str


@dataclass
class ReplaceResult:
    """
    Outcome of replace().

    ``notes`` holds one human-readable line per action taken beyond a plain
    upload. Today that is only "the old object was deleted first".
    """
    url: str
    notes: list[str] = field(default_factory=list)

    @property
    def replaced(self) -> bool:
        return bool(self.notes)


# ---------------------------------------------------------------------------
# TTL parsing
# ---------------------------------------------------------------------------

_TTL_UNITS = {
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "h": 3600, "hour": 3600, "hours": 3600,
    "d": 86400, "day": 86400, "days": 86400,
    "w": 604800, "week": 604800, "weeks": 604800,
}

_TTL_PATTERN = re.compile(r"^\+?\s*(\d+)\s*([a-z]+)$")

TTLValue = Union[int, timedelta, str]


def parse_ttl(value: TTLValue) -> int:
    """
    Convert a presign TTL to whole seconds.

    Accepts integer seconds, a ``timedelta``, or a duration phrase like
    ``"5 seconds"``, ``"+10 minutes"`` or ``"1 hour"``.
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Invalid TTL: {value!r}")

    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
    elif isinstance(value, int):
        seconds = value
    elif isinstance(value, str):
        text = value.strip().lower()
        if text.isdigit():
            seconds = int(text)
        else:
            match = _TTL_PATTERN.match(text)
            if not match or match.group(2) not in _TTL_UNITS:
                raise InvalidArgumentError(f"Invalid TTL: {value!r}")
            seconds = int(match.group(1)) * _TTL_UNITS[match.group(2)]
    else:
        raise InvalidArgumentError(f"Invalid TTL: {value!r}")

    if seconds <= 0:
        raise InvalidArgumentError(f"TTL must be positive, got {value!r}")
    return seconds
