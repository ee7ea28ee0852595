# ABOUTME: Unit tests for the data model
# ABOUTME: Covers timestamp handling, cache record parsing and settings serialization

"""Tests for data models."""

from datetime import timedelta, timezone

from conftest import NOW

from aws_creds.models import (
    AppSettings,
    CachedToken,
    RefreshResult,
    RefreshSummary,
    SoftResult,
    format_timestamp,
    parse_timestamp,
)


class TestTimestamps:
    """Tests for the AWS CLI timestamp format."""

    def test_parse_z_suffix(self):
        assert parse_timestamp("2025-06-01T12:00:00Z") == NOW

    def test_parse_offset(self):
        assert parse_timestamp("2025-06-01T14:00:00+02:00") == NOW

    def test_naive_is_utc(self):
        assert parse_timestamp("2025-06-01T12:00:00") == NOW

    def test_parse_legacy_utc_suffix(self):
        assert parse_timestamp("2025-06-01T12:00:00UTC") == NOW

    def test_result_is_utc(self):
        assert parse_timestamp("2025-06-01T14:00:00+02:00").utcoffset() == timedelta(0)

    def test_format(self):
        local = NOW.astimezone(timezone(timedelta(hours=-5)))
        assert format_timestamp(local) == "2025-06-01T12:00:00Z"


class TestCachedToken:
    """Tests for CachedToken."""

    def test_from_dict(self):
        token = CachedToken.from_dict(
            {
                "startUrl": "https://dev.awsapps.com/start",
                "region": "us-east-1",
                "accessToken": "abc",
                "expiresAt": "2025-06-01T12:00:00Z",
            }
        )

        assert token.access_token == "abc"
        assert token.expires_at == NOW
        assert token.start_url == "https://dev.awsapps.com/start"

    def test_from_dict_legacy_utc_suffix(self):
        token = CachedToken.from_dict({"accessToken": "abc", "expiresAt": "2025-06-01T12:00:00UTC"})

        assert token is not None
        assert token.expires_at == NOW

    def test_from_dict_requires_token_and_expiry(self):
        assert CachedToken.from_dict({"expiresAt": "2025-06-01T12:00:00Z"}) is None
        assert CachedToken.from_dict({"accessToken": "abc"}) is None

    def test_from_dict_rejects_bad_timestamp(self):
        assert CachedToken.from_dict({"accessToken": "abc", "expiresAt": "tomorrow"}) is None

    def test_expiry_boundary(self):
        token = CachedToken(access_token="abc", expires_at=NOW)

        assert token.is_expired(NOW)
        assert not token.is_expired(NOW - timedelta(seconds=1))

    def test_to_dict(self):
        token = CachedToken(access_token="abc", expires_at=NOW, start_url="https://x", region="eu-west-1")

        assert token.to_dict() == {
            "startUrl": "https://x",
            "region": "eu-west-1",
            "accessToken": "abc",
            "expiresAt": "2025-06-01T12:00:00Z",
        }


class TestRefreshSummary:
    """Tests for RefreshSummary."""

    def test_counts_and_description(self):
        summary = RefreshSummary(
            results=[
                RefreshResult("a", True),
                RefreshResult("b", False, "Access denied"),
                RefreshResult("c", True),
            ]
        )

        assert summary.success_count == 2
        assert summary.error_count == 1
        assert summary.describe() == "Refreshed 2 profile(s), 1 error(s)"
        assert summary.get("b").error == "Access denied"
        assert summary.get("missing") is None

    def test_description_without_errors(self):
        summary = RefreshSummary(results=[RefreshResult("a", True)])

        assert summary.describe() == "Refreshed 1 profile(s)"


class TestSoftResult:
    def test_truthiness(self):
        assert SoftResult.success()
        assert not SoftResult.failed("nope")
        assert SoftResult.failed("nope").error == "nope"


class TestAppSettings:
    """Tests for AppSettings serialization."""

    def test_defaults(self):
        settings = AppSettings()

        assert settings.notifications is True
        assert settings.default_interval == 30
        assert settings.favorite_profiles == []
        assert settings.last_refresh is None

    def test_to_dict_uses_stored_keys(self):
        settings = AppSettings(notifications=False, default_interval=60, favorite_profiles=["prod"])

        assert settings.to_dict() == {
            "notifications": False,
            "defaultInterval": 60,
            "favoriteProfiles": ["prod"],
        }

    def test_from_dict_keeps_defaults_for_missing_keys(self):
        settings = AppSettings.from_dict({"favoriteProfiles": ["dev"], "lastRefresh": "2025-06-01T12:00:00Z"})

        assert settings.notifications is True
        assert settings.default_interval == 30
        assert settings.favorite_profiles == ["dev"]
        assert settings.last_refresh == "2025-06-01T12:00:00Z"

    def test_roundtrip(self):
        settings = AppSettings(default_interval=15, last_refresh=format_timestamp(NOW))

        assert AppSettings.from_dict(settings.to_dict()) == settings
