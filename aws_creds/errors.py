# ABOUTME: Exception hierarchy for the AWS SSO credentials manager
# ABOUTME: Only raised for conditions that callers are expected to report, not retry

"""Exceptions raised by aws_creds."""


class AwsCredsError(Exception):
    """Base class for all aws_creds errors."""


class ConfigurationError(AwsCredsError):
    """The tool cannot locate or read its configuration (e.g. no home directory)."""


class CredentialsFileError(AwsCredsError):
    """Writing ~/.aws/credentials failed."""


class LoginInProgressError(AwsCredsError):
    """A device authorization session is already open for this profile."""

    def __init__(self, profile_name: str):
        super().__init__(f"A login is already in progress for profile '{profile_name}'")
        self.profile_name = profile_name


class CredentialExchangeError(AwsCredsError):
    """Exchanging an SSO access token for role credentials failed."""
