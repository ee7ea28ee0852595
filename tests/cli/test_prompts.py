# ABOUTME: Tests for the shared interactive CLI helpers
# ABOUTME: questionary and the browser are patched so no terminal interaction happens

"""Tests for CLI prompt helpers."""

from datetime import timedelta
from unittest.mock import patch

from conftest import NOW
from rich.console import Console

from aws_creds.cli.utils.prompts import device_login_prompt, resolve_profiles, select_interval, select_profiles
from aws_creds.device_flow import DeviceAuthSession
from aws_creds.models import AppSettings, SoftResult


def make_session(complete_url="https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH"):
    return DeviceAuthSession(
        client_id="client-id",
        client_secret="client-secret",
        device_code="device-123",
        user_code="ABCD-EFGH",
        verification_uri="https://device.sso.us-east-1.amazonaws.com/",
        verification_uri_complete=complete_url,
        expires_at=NOW + timedelta(minutes=10),
        interval=5,
    )


class TestResolveProfiles:
    def test_keeps_given_order(self, make_profile):
        profiles = [make_profile("a"), make_profile("b")]

        assert [p.name for p in resolve_profiles(Console(), profiles, ["b", "a"])] == ["b", "a"]

    def test_unknown_name(self, make_profile, capsys):
        assert resolve_profiles(Console(), [make_profile("a")], ["a", "z"]) is None
        assert "Profile 'z'" in capsys.readouterr().out


class TestSelectProfiles:
    """Tests for select_profiles."""

    @patch("aws_creds.cli.utils.prompts.questionary.checkbox")
    def test_favorites_first_and_checked(self, mock_checkbox, make_profile):
        mock_checkbox.return_value.ask.return_value = ["prod", "alpha"]
        profiles = [make_profile("alpha"), make_profile("prod"), make_profile("zeta")]

        selected = select_profiles(profiles, AppSettings(favorite_profiles=["prod"]))

        choices = mock_checkbox.call_args[1]["choices"]
        assert [c.value for c in choices] == ["prod", "alpha", "zeta"]
        assert [c.checked for c in choices] == [True, False, False]
        assert choices[0].title == "prod ★"
        assert [p.name for p in selected] == ["prod", "alpha"]

    @patch("aws_creds.cli.utils.prompts.questionary.checkbox")
    def test_cancelled(self, mock_checkbox, make_profile):
        mock_checkbox.return_value.ask.return_value = None

        assert select_profiles([make_profile("a")], AppSettings()) is None


class TestSelectInterval:
    @patch("aws_creds.cli.utils.prompts.questionary.select")
    def test_choices(self, mock_select):
        mock_select.return_value.ask.return_value = 60

        assert select_interval(30) == 60

        kwargs = mock_select.call_args[1]
        assert [c.value for c in kwargs["choices"]] == [15, 30, 60, 120]
        assert kwargs["choices"][1].title == "30 minutes (recommended)"
        assert kwargs["default"] == 30

    @patch("aws_creds.cli.utils.prompts.questionary.select")
    def test_custom_default_not_offered(self, mock_select):
        select_interval(45)

        assert mock_select.call_args[1]["default"] is None


class TestDeviceLoginPrompt:
    """Tests for device_login_prompt."""

    def test_shows_code_and_opens_complete_url(self, make_profile, capsys):
        with patch("aws_creds.cli.utils.prompts.open_browser", return_value=SoftResult.success()) as mock_open:
            device_login_prompt(Console())(make_profile("dev"), make_session())

        mock_open.assert_called_once_with("https://device.sso.us-east-1.amazonaws.com/?user_code=ABCD-EFGH")
        out = capsys.readouterr().out
        assert "ABCD-EFGH" in out
        assert "dev" in out

    def test_falls_back_to_plain_url(self, make_profile):
        with patch("aws_creds.cli.utils.prompts.open_browser", return_value=SoftResult.success()) as mock_open:
            device_login_prompt(Console())(make_profile("dev"), make_session(complete_url=None))

        mock_open.assert_called_once_with("https://device.sso.us-east-1.amazonaws.com/")

    def test_no_browser(self, make_profile):
        with patch("aws_creds.cli.utils.prompts.open_browser") as mock_open:
            device_login_prompt(Console(), launch_browser=False)(make_profile("dev"), make_session())

        mock_open.assert_not_called()

    def test_browser_failure_is_reported(self, make_profile, capsys):
        with patch("aws_creds.cli.utils.prompts.open_browser", return_value=SoftResult.failed("No browser available")):
            device_login_prompt(Console())(make_profile("dev"), make_session())

        assert "No browser available" in capsys.readouterr().out
