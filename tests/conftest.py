"""Pytest configuration and shared fixtures."""

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from botocore.exceptions import ClientError

from aws_creds.config import ToolConfig
from aws_creds.models import SSOProfile
from aws_creds.token_cache import cache_path

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


# Set AWS region for all tests to avoid NoRegionError
@pytest.fixture(autouse=True, scope="session")
def set_aws_region():
    """Set AWS region for all tests."""
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
    os.environ["AWS_REGION"] = "us-east-1"


class VirtualClock:
    """Clock whose sleeps advance time instantly and are recorded."""

    def __init__(self, start: datetime = NOW):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def sleep(self, seconds: float) -> bool:
        self.sleeps.append(seconds)
        self.advance(seconds)
        return False


def client_error(code: str, message: str = "", operation: str = "CreateToken") -> ClientError:
    """Build a botocore ClientError with the given code."""
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


def write_cache_record(cache_dir: Path, profile: SSOProfile, expires_at: datetime, token: str = "cached-token"):
    """Write a token cache file the way ``aws sso login`` does."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    record = {
        "startUrl": profile.sso_start_url,
        "region": profile.sso_region,
        "accessToken": token,
        "expiresAt": expires_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    path = cache_path(cache_dir, profile)
    path.write_text(json.dumps(record))
    return path


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def tool_config(tmp_path):
    """ToolConfig rooted in a temporary home directory."""
    return ToolConfig.from_environment(environ={}, home=tmp_path)


@pytest.fixture
def make_profile():
    def _make(name="dev", **overrides):
        values = {
            "name": name,
            "sso_start_url": f"https://{name}.awsapps.com/start",
            "sso_account_id": "111122223333",
            "sso_role_name": "Developer",
            "sso_region": "us-east-1",
        }
        values.update(overrides)
        return SSOProfile(**values)

    return _make


@pytest.fixture
def role_credentials_response():
    return {
        "roleCredentials": {
            "accessKeyId": "ASIAEXAMPLE",
            "secretAccessKey": "secret/with%percent",
            "sessionToken": "session-token",
            "expiration": 1748782800000,
        }
    }


SAMPLE_CONFIG = """\
[sso-session corp]
sso_start_url = https://corp.awsapps.com/start
sso_region = us-east-1

[profile dev]
sso_session = corp
sso_account_id = 111122223333
sso_role_name = Developer
region = us-west-2

[profile prod]
sso_start_url = https://prod.awsapps.com/start
sso_region = eu-west-1
sso_account_id = 444455556666
sso_role_name = ReadOnly

[profile static]
region = us-east-1
"""


@pytest.fixture
def aws_home(tmp_path, monkeypatch):
    """Point HOME at a temporary directory and return the ToolConfig commands will see."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ("AWS_CONFIG_FILE", "AWS_SHARED_CREDENTIALS_FILE", "AWS_PROFILE", "AWS_CREDS_DEBUG"):
        monkeypatch.delenv(var, raising=False)

    config = ToolConfig.from_environment()
    config.aws_dir.mkdir(parents=True, exist_ok=True)
    return config


@pytest.fixture
def sample_config(aws_home):
    """AWS home with two SSO profiles (dev, prod) and one static profile."""
    aws_home.config_file.write_text(SAMPLE_CONFIG)
    return aws_home
