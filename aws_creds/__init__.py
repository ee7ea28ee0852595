# ABOUTME: AWS SSO credentials manager package
# ABOUTME: Keeps ~/.aws/credentials filled with fresh role credentials for SSO profiles

"""AWS SSO credentials manager."""

__version__ = "1.0.0"
