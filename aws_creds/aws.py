# ABOUTME: AWS utility functions for the SSO credentials manager
# ABOUTME: Wraps the sso-oidc, sso and sts boto3 clients used by the login and refresh flows

"""AWS API helpers."""

from datetime import datetime, timezone

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import CredentialExchangeError
from .models import AWSCredentials, CallerIdentity, SSOProfile

DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"
CLIENT_NAME = "aws-creds"

# SSO OIDC error codes with a defined meaning during polling
AUTHORIZATION_PENDING = "AuthorizationPendingException"
SLOW_DOWN = "SlowDownException"
EXPIRED_TOKEN = "ExpiredTokenException"
ACCESS_DENIED = "AccessDeniedException"

# Errors that mean the SSO session itself is no longer usable
SESSION_EXPIRED_CODES = {"UnauthorizedException", "ExpiredTokenException", "InvalidGrantException", "ForbiddenException"}


def error_code(error: Exception) -> str | None:
    """Return the AWS error code of a ClientError, or None for anything else."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def error_message(error: Exception) -> str:
    """Short human-readable text for an AWS error."""
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        return details.get("Message") or details.get("Code") or str(error)
    return str(error)


def oidc_client(region: str):
    """Create an SSO OIDC client. These APIs are unauthenticated."""
    return boto3.client("sso-oidc", region_name=region, config=Config(signature_version=UNSIGNED))


def sso_client(region: str):
    """Create an SSO portal client. These APIs use the bearer access token, not SigV4."""
    return boto3.client("sso", region_name=region, config=Config(signature_version=UNSIGNED))


def get_role_credentials(client, profile: SSOProfile, access_token: str) -> AWSCredentials:
    """Exchange an SSO access token for the profile's role credentials.

    Args:
        client: boto3 ``sso`` client.
        profile: Profile naming the account and role.
        access_token: Valid SSO access token.

    Returns:
        AWSCredentials for the account/role.

    Raises:
        CredentialExchangeError: If the call fails or returns incomplete credentials.
    """
    try:
        response = client.get_role_credentials(
            roleName=profile.sso_role_name,
            accountId=profile.sso_account_id,
            accessToken=access_token,
        )
    except (ClientError, BotoCoreError) as e:
        raise CredentialExchangeError(error_message(e)) from e

    role_credentials = response.get("roleCredentials") or {}
    access_key = role_credentials.get("accessKeyId")
    secret_key = role_credentials.get("secretAccessKey")
    if not access_key or not secret_key:
        raise CredentialExchangeError("Role credentials response was missing keys")

    expiration = None
    if role_credentials.get("expiration"):
        # Milliseconds since the epoch
        expiration = datetime.fromtimestamp(role_credentials["expiration"] / 1000, tz=timezone.utc)

    return AWSCredentials(
        access_key_id=access_key,
        secret_access_key=secret_key,
        session_token=role_credentials.get("sessionToken"),
        expiration=expiration,
    )


def get_caller_identity(credentials: AWSCredentials | None = None, region: str | None = None) -> CallerIdentity:
    """Call STS GetCallerIdentity, with explicit credentials or the default chain."""
    kwargs = {}
    if region:
        kwargs["region_name"] = region
    if credentials:
        kwargs["aws_access_key_id"] = credentials.access_key_id
        kwargs["aws_secret_access_key"] = credentials.secret_access_key
        kwargs["aws_session_token"] = credentials.session_token

    client = boto3.client("sts", **kwargs)
    response = client.get_caller_identity()

    return CallerIdentity(
        account_id=response.get("Account") or "unknown",
        arn=response.get("Arn") or "unknown",
        user_id=response.get("UserId") or "unknown",
    )


def parse_identity_arn(arn: str) -> tuple[str, str]:
    """Split an identity ARN into (name, "Role" | "User")."""
    name = arn.split("/")[-1] or arn
    kind = "Role" if ":assumed-role/" in arn else "User"
    return name, kind
