# ABOUTME: Tests for the status command
# ABOUTME: Status checks are patched; verifies profile selection and the summary line

"""Tests for the status command."""

from unittest.mock import patch

import pytest
from cleo.testers.command_tester import CommandTester

from aws_creds.cli.commands.status import StatusCommand
from aws_creds.models import CredentialStatus, ProfileStatus


def fake_statuses(profiles, config):
    return [
        ProfileStatus(p, CredentialStatus.VALID if p.name == "dev" else CredentialStatus.EXPIRED, error=None)
        for p in profiles
    ]


class TestStatusCommand:
    """Test the status command."""

    @pytest.fixture
    def tester(self):
        return CommandTester(StatusCommand())

    def test_all_profiles(self, tester, sample_config, capsys):
        with patch("aws_creds.cli.commands.status.check_all_profiles", side_effect=fake_statuses) as mock_check:
            tester.execute("")

        assert tester.status_code == 0
        checked = [p.name for p in mock_check.call_args[0][0]]
        assert checked == ["dev", "prod"]
        assert "1 of 2 profile(s) have a valid session" in capsys.readouterr().out

    def test_favorites_checked_first(self, tester, sample_config):
        sample_config.settings_file.write_text('{"favoriteProfiles": ["prod"]}')

        with patch("aws_creds.cli.commands.status.check_all_profiles", side_effect=fake_statuses) as mock_check:
            tester.execute("")

        assert [p.name for p in mock_check.call_args[0][0]] == ["prod", "dev"]

    def test_named_profiles(self, tester, sample_config):
        with patch("aws_creds.cli.commands.status.check_all_profiles", side_effect=fake_statuses) as mock_check:
            tester.execute("prod")

        assert tester.status_code == 0
        assert [p.name for p in mock_check.call_args[0][0]] == ["prod"]

    def test_unknown_profile(self, tester, sample_config, capsys):
        with patch("aws_creds.cli.commands.status.check_all_profiles") as mock_check:
            tester.execute("static")

        assert tester.status_code == 1
        mock_check.assert_not_called()
        assert "not a configured SSO profile" in capsys.readouterr().out

    def test_no_profiles(self, tester, aws_home, capsys):
        tester.execute("")

        assert tester.status_code == 1
        assert "No SSO profiles found" in capsys.readouterr().out
