# ABOUTME: Data model for SSO profiles, cached tokens, credentials and refresh results
# ABOUTME: Plain dataclasses shared by discovery, the token cache, the device flow and the CLI

"""
Data model for the AWS SSO credentials manager.

Every record here is either parsed from a file the AWS CLI also uses
(~/.aws/config, ~/.aws/sso/cache/*.json, ~/.aws/credentials) or derived on
demand. Nothing in this module performs I/O.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from botocore.utils import parse_timestamp as botocore_parse_timestamp

# Refresh intervals (minutes) offered by the CLI
REFRESH_INTERVALS = [
    {"value": 15, "label": "15 minutes"},
    {"value": 30, "label": "30 minutes", "hint": "recommended"},
    {"value": 60, "label": "1 hour"},
    {"value": 120, "label": "2 hours"},
]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ``expiresAt`` value as written by any AWS CLI release.

    Accepts ISO-8601 with ``Z`` or a numeric offset and the older ``...UTC``
    suffix. Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not a timestamp.
    """
    parsed = botocore_parse_timestamp(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way the AWS CLI writes ``expiresAt``."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class SSOProfile:
    """One configured SSO login target from ~/.aws/config."""

    name: str
    sso_start_url: str
    sso_account_id: str
    sso_role_name: str
    sso_region: str
    region: str | None = None
    sso_session: str | None = None

    @property
    def client_region(self) -> str:
        """Region used for STS calls made with this profile's credentials."""
        return self.region or self.sso_region


@dataclass(frozen=True)
class CachedToken:
    """An SSO access token as stored in the AWS CLI token cache."""

    access_token: str
    expires_at: datetime
    start_url: str | None = None
    region: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once ``now`` has reached the expiry instant."""
        return (now or utc_now()) >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk cache record."""
        return {
            "startUrl": self.start_url,
            "region": self.region,
            "accessToken": self.access_token,
            "expiresAt": format_timestamp(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedToken | None":
        """Build from a cache record, or None if it lacks a token or expiry."""
        access_token = data.get("accessToken")
        expires_at = data.get("expiresAt")
        if not access_token or not expires_at:
            return None

        try:
            expiry = parse_timestamp(str(expires_at))
        except ValueError:
            return None

        return cls(
            access_token=access_token,
            expires_at=expiry,
            start_url=data.get("startUrl"),
            region=data.get("region"),
        )


@dataclass(frozen=True)
class AWSCredentials:
    """Role credentials for one account/role pair."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    expiration: datetime | None = None


@dataclass(frozen=True)
class CallerIdentity:
    """Result of STS GetCallerIdentity."""

    account_id: str
    arn: str
    user_id: str


class CredentialStatus(str, Enum):
    """Health of a profile's SSO session."""

    VALID = "valid"
    EXPIRED = "expired"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProfileStatus:
    """Read-only status projection for one profile."""

    profile: SSOProfile
    status: CredentialStatus
    expires_at: datetime | None = None
    account_id: str | None = None
    arn: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of refreshing one profile."""

    name: str
    success: bool
    error: str | None = None
    needs_login: bool = False


@dataclass
class RefreshSummary:
    """Per-profile outcomes of one refresh cycle, in processing order."""

    results: list[RefreshResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def get(self, name: str) -> RefreshResult | None:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def describe(self) -> str:
        """Human readable one-line summary."""
        text = f"Refreshed {self.success_count} profile(s)"
        if self.error_count:
            text += f", {self.error_count} error(s)"
        return text


@dataclass(frozen=True)
class SoftResult:
    """Outcome of a best-effort operation whose failure must not abort the caller."""

    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> "SoftResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, error: str) -> "SoftResult":
        return cls(ok=False, error=error)

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class AppSettings:
    """User preferences stored in ~/.aws/credentials-manager.json."""

    notifications: bool = True
    default_interval: int = 30  # minutes
    favorite_profiles: list[str] = field(default_factory=list)
    last_refresh: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk JSON shape."""
        data: dict[str, Any] = {
            "notifications": self.notifications,
            "defaultInterval": self.default_interval,
            "favoriteProfiles": list(self.favorite_profiles),
        }
        if self.last_refresh:
            data["lastRefresh"] = self.last_refresh
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppSettings":
        """Create settings from stored JSON, keeping defaults for missing keys."""
        defaults = cls()
        return replace(
            defaults,
            notifications=bool(data.get("notifications", defaults.notifications)),
            default_interval=int(data.get("defaultInterval", defaults.default_interval)),
            favorite_profiles=list(data.get("favoriteProfiles", defaults.favorite_profiles)),
            last_refresh=data.get("lastRefresh", defaults.last_refresh),
        )
