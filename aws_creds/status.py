# ABOUTME: Read-only status checks for SSO profiles
# ABOUTME: Uses the cached token to fetch role credentials and confirm them with STS

"""Profile status checks."""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError

from . import aws
from .config import ToolConfig
from .errors import CredentialExchangeError
from .models import CredentialStatus, ProfileStatus, SSOProfile, utc_now
from .token_cache import find_cached_token

MAX_STATUS_WORKERS = 8


def check_profile_status(
    profile: SSOProfile,
    config: ToolConfig,
    sso_factory: Callable = aws.sso_client,
    identity: Callable = aws.get_caller_identity,
    now: datetime | None = None,
) -> ProfileStatus:
    """Determine whether a profile's SSO session is usable.

    Args:
        profile: Profile to check.
        config: Tool configuration.
        sso_factory: Builds an ``sso`` client for a region.
        identity: Resolves the caller identity for a set of credentials.
        now: Current time (defaults to the wall clock).

    Returns:
        ProfileStatus; never raises for AWS or cache failures.
    """
    token = find_cached_token(config.sso_cache_dir, profile, config.debug_print)
    if token is None:
        return ProfileStatus(profile, CredentialStatus.EXPIRED, error="No cached SSO token")
    if token.is_expired(now or utc_now()):
        return ProfileStatus(profile, CredentialStatus.EXPIRED, expires_at=token.expires_at, error="Token expired")

    try:
        credentials = aws.get_role_credentials(sso_factory(profile.sso_region), profile, token.access_token)
        caller = identity(credentials, profile.client_region)
    except CredentialExchangeError as e:
        cause = e.__cause__
        if aws.error_code(cause) in aws.SESSION_EXPIRED_CODES:
            return ProfileStatus(profile, CredentialStatus.EXPIRED, error="Token expired or invalid")
        return ProfileStatus(profile, CredentialStatus.ERROR, error=str(e))
    except (ClientError, BotoCoreError) as e:
        if aws.error_code(e) in aws.SESSION_EXPIRED_CODES:
            return ProfileStatus(profile, CredentialStatus.EXPIRED, error="Token expired or invalid")
        return ProfileStatus(profile, CredentialStatus.ERROR, error=aws.error_message(e))

    return ProfileStatus(
        profile,
        CredentialStatus.VALID,
        expires_at=token.expires_at,
        account_id=caller.account_id,
        arn=caller.arn,
    )


def check_all_profiles(profiles: list[SSOProfile], config: ToolConfig, **kwargs) -> list[ProfileStatus]:
    """Check several profiles concurrently; results keep the input order."""
    if not profiles:
        return []

    workers = min(MAX_STATUS_WORKERS, len(profiles))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda p: check_profile_status(p, config, **kwargs), profiles))


def format_expiry(expires_at: datetime | None, now: datetime | None = None) -> str:
    """Render time left until expiry as ``"2h 5m"``, ``"12m"``, ``"Expired"`` or ``"Unknown"``."""
    if expires_at is None:
        return "Unknown"

    remaining = (expires_at - (now or utc_now())).total_seconds()
    if remaining < 0:
        return "Expired"

    minutes = int(remaining // 60)
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    return f"{minutes}m"
