# ABOUTME: Tests for the whoami command
# ABOUTME: STS is patched; checks identity formatting and error handling

"""Tests for the whoami command."""

from unittest.mock import patch

import pytest
from cleo.testers.command_tester import CommandTester
from conftest import client_error

from aws_creds.cli.commands.whoami import WhoamiCommand
from aws_creds.models import CallerIdentity


class TestWhoamiCommand:
    """Test the whoami command."""

    @pytest.fixture
    def tester(self):
        return CommandTester(WhoamiCommand())

    def test_assumed_role(self, tester, aws_home, monkeypatch, capsys):
        monkeypatch.setenv("AWS_PROFILE", "dev")
        identity = CallerIdentity("111122223333", "arn:aws:sts::111122223333:assumed-role/Developer/alice", "AROA")

        with patch("aws_creds.cli.commands.whoami.get_caller_identity", return_value=identity):
            tester.execute("")

        assert tester.status_code == 0
        out = capsys.readouterr().out
        assert "Account: 111122223333" in out
        assert "Profile: dev" in out
        assert "Role: alice" in out
        assert "User ID: AROA" in out

    def test_error(self, tester, aws_home, capsys):
        with patch(
            "aws_creds.cli.commands.whoami.get_caller_identity",
            side_effect=client_error("ExpiredToken", "The security token included in the request is expired"),
        ):
            tester.execute("")

        assert tester.status_code == 1
        assert "Failed to get account info" in capsys.readouterr().out
