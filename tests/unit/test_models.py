"""
Unit tests for the store's value objects.

These cover validation and small behaviors of the models without
touching a backend.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from cloudstore.core.errors import InvalidArgumentError
from cloudstore.core.models import (
    ReplaceResult,
    StoreConfig,
    UploadRequest,
    Visibility,
    parse_ttl,
)


# ---------------------------------------------------------------------------
# Visibility Tests
# ---------------------------------------------------------------------------

class TestVisibility:
    """Tests for the visibility flag."""

    def test_maps_to_canned_acl(self):
        assert Visibility.PUBLIC.acl == "public-read"
        assert Visibility.PRIVATE.acl == "private"

    @pytest.mark.parametrize("value", ["private", "PRIVATE", " Private "])
    def test_parse_is_case_insensitive(self, value):
        assert Visibility.parse(value) is Visibility.PRIVATE

    def test_parse_empty_defaults_to_public(self):
        assert Visibility.parse(None) is Visibility.PUBLIC
        assert Visibility.parse("") is Visibility.PUBLIC

    def test_parse_rejects_unknown(self):
        with pytest.raises(InvalidArgumentError):
            Visibility.parse("protected")


# ---------------------------------------------------------------------------
# StoreConfig Tests
# ---------------------------------------------------------------------------

class TestStoreConfig:
    """Tests for the immutable store configuration."""

    def test_defaults(self):
        config = StoreConfig(bucket="media")

        assert config.prefix == "public"
        assert config.default_visibility is Visibility.PUBLIC
        assert config.endpoint_url is None

    def test_bucket_is_required(self):
        with pytest.raises(InvalidArgumentError, match="Bucket"):
            StoreConfig(bucket="")

    def test_is_frozen(self):
        config = StoreConfig(bucket="media")

        with pytest.raises(AttributeError):
            config.bucket = "other"

    def test_has_credentials_needs_both_keys(self):
        assert not StoreConfig(bucket="media", access_key_id="AKIA").has_credentials
        assert StoreConfig(
            bucket="media", access_key_id="AKIA", secret_access_key="secret"
        ).has_credentials


# ---------------------------------------------------------------------------
# UploadRequest Tests
# ---------------------------------------------------------------------------

class TestUploadRequest:
    """Tests for per-call upload requests."""

    def test_write_options_always_force_attachment(self):
        request = UploadRequest(local_path=Path("a.txt"), remote_path="docs/a.txt")

        assert request.write_options == {
            "visibility": Visibility.PUBLIC,
            "content_disposition": "attachment",
        }

    def test_write_options_include_metadata_when_given(self):
        request = UploadRequest(
            local_path=Path("a.txt"),
            remote_path="docs/a.txt",
            metadata={"source": "import"},
        )

        assert request.write_options["metadata"] == {"source": "import"}

    def test_remote_path_required(self):
        with pytest.raises(InvalidArgumentError):
            UploadRequest(local_path=Path("a.txt"), remote_path="")


# ---------------------------------------------------------------------------
# ReplaceResult Tests
# ---------------------------------------------------------------------------

class TestReplaceResult:
    def test_replaced_reflects_notes(self):
        assert not ReplaceResult(url="u").replaced
        assert ReplaceResult(url="u", notes=["deleted old"]).replaced


# ---------------------------------------------------------------------------
# TTL Parsing Tests
# ---------------------------------------------------------------------------

class TestParseTtl:
    """Tests for presign lifetime parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (30, 30),
            ("45", 45),
            ("5 seconds", 5),
            ("1 second", 1),
            ("+10 minutes", 600),
            ("2 hours", 7200),
            ("1 day", 86400),
            ("1 week", 604800),
            (timedelta(minutes=3), 180),
        ],
    )
    def test_accepted_forms(self, value, expected):
        assert parse_ttl(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "5 fortnights", "-5 seconds", 0, -1, True, 1.5])
    def test_rejected_forms(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_ttl(value)
