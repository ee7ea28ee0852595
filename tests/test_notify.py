# ABOUTME: Unit tests for desktop notifications and browser launching
# ABOUTME: subprocess, shutil and webbrowser are patched so nothing is actually shown

"""Tests for notification helpers."""

import subprocess
from unittest.mock import MagicMock, patch

from aws_creds.notify import notification_command, open_browser, send_notification


class TestNotificationCommand:
    def test_macos(self):
        command = notification_command('Say "hi"', "back\\slash", system="Darwin")

        assert command[:2] == ["osascript", "-e"]
        assert command[2] == 'display notification "back\\\\slash" with title "Say \\"hi\\""'

    def test_linux(self):
        assert notification_command("Title", "Body", system="Linux") == ["notify-send", "Title", "Body"]

    def test_unsupported(self):
        assert notification_command("Title", "Body", system="Windows") is None


class TestSendNotification:
    """Tests for send_notification."""

    @patch("aws_creds.notify.subprocess.run")
    @patch("aws_creds.notify.shutil.which", return_value="/usr/bin/notify-send")
    @patch("aws_creds.notify.platform.system", return_value="Linux")
    def test_success(self, mock_system, mock_which, mock_run):
        mock_run.return_value = MagicMock(returncode=0)

        result = send_notification("Title", "Body")

        assert result.ok
        args, kwargs = mock_run.call_args
        assert args[0] == ["notify-send", "Title", "Body"]
        assert kwargs["timeout"] == 10

    @patch("aws_creds.notify.shutil.which", return_value=None)
    @patch("aws_creds.notify.platform.system", return_value="Linux")
    def test_missing_binary(self, mock_system, mock_which):
        result = send_notification("Title", "Body")

        assert not result
        assert result.error == "notify-send not found"

    @patch("aws_creds.notify.platform.system", return_value="Windows")
    def test_unsupported_platform(self, mock_system):
        assert not send_notification("Title", "Body")

    @patch("aws_creds.notify.subprocess.run", side_effect=subprocess.TimeoutExpired("osascript", 10))
    @patch("aws_creds.notify.shutil.which", return_value="/usr/bin/osascript")
    @patch("aws_creds.notify.platform.system", return_value="Darwin")
    def test_timeout_is_soft(self, mock_system, mock_which, mock_run):
        assert not send_notification("Title", "Body")

    @patch("aws_creds.notify.subprocess.run")
    @patch("aws_creds.notify.shutil.which", return_value="/usr/bin/notify-send")
    @patch("aws_creds.notify.platform.system", return_value="Linux")
    def test_nonzero_exit(self, mock_system, mock_which, mock_run):
        mock_run.return_value = MagicMock(returncode=1)

        result = send_notification("Title", "Body")

        assert "status 1" in result.error


class TestOpenBrowser:
    @patch("aws_creds.notify.webbrowser.open", return_value=True)
    def test_opened(self, mock_open):
        assert open_browser("https://example.com").ok
        mock_open.assert_called_once_with("https://example.com")

    @patch("aws_creds.notify.webbrowser.open", return_value=False)
    def test_no_browser(self, mock_open):
        assert open_browser("https://example.com").error == "No browser available"
